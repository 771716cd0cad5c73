# visibility.py
from typing import Optional, Union

from .enums import UploadType, Visibility
from .exceptions import InvalidConfigurationValue, InvalidVisibility


class VisibilityConverter:
    """
    Maps filesystem visibility onto Cloudinary upload types and back.

    The mapping is lossy for private assets: "private" is written using the
    configured private upload type (authenticated by default) and both
    authenticated and private read back as "private".
    """

    def __init__(
        self,
        default_for_files: UploadType = UploadType.UPLOAD,
        default_private: UploadType = UploadType.AUTHENTICATED,
    ):
        if default_private not in (UploadType.AUTHENTICATED, UploadType.PRIVATE):
            raise InvalidConfigurationValue(
                f"Invalid private upload type [{default_private}]. Must be one of [authenticated, private]."
            )
        self.default_for_files = UploadType(default_for_files)
        self.default_private = UploadType(default_private)

    def visibility_to_upload_type(self, visibility: Union[str, Visibility]) -> UploadType:
        value = visibility.value if isinstance(visibility, Visibility) else visibility
        if value == Visibility.PUBLIC.value:
            return UploadType.UPLOAD
        if value == Visibility.PRIVATE.value:
            return self.default_private
        raise InvalidVisibility(str(value), "one of ['public', 'private']")

    def upload_type_to_visibility(self, upload_type: Union[str, UploadType, None]) -> Visibility:
        value = upload_type.value if isinstance(upload_type, UploadType) else upload_type
        if value == UploadType.UPLOAD.value:
            return Visibility.PUBLIC
        if value in (UploadType.AUTHENTICATED.value, UploadType.PRIVATE.value):
            return Visibility.PRIVATE
        expected = ", ".join(member.value for member in UploadType)
        raise InvalidVisibility(str(value), f"one of [{expected}]")

    def default_upload_type(self) -> UploadType:
        return self.default_for_files

    def default_visibility(self) -> Visibility:
        return self.upload_type_to_visibility(self.default_for_files)


def coerce_visibility(value: Optional[str], default: Visibility = Visibility.PUBLIC) -> Visibility:
    """Parses a caller supplied visibility string, raising InvalidVisibility."""
    if value is None:
        return default
    try:
        return Visibility(value)
    except ValueError:
        raise InvalidVisibility(str(value), "one of ['public', 'private']") from None
