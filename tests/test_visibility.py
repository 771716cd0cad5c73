# tests/test_visibility.py
import pytest

from cloudinary_storage.enums import UploadType, Visibility
from cloudinary_storage.exceptions import InvalidConfigurationValue, InvalidVisibility
from cloudinary_storage.visibility import VisibilityConverter, coerce_visibility


def test_visibility_to_upload_type():
    converter = VisibilityConverter()
    assert converter.visibility_to_upload_type("public") == UploadType.UPLOAD
    assert converter.visibility_to_upload_type(Visibility.PRIVATE) == UploadType.AUTHENTICATED


def test_private_upload_type_is_configurable():
    converter = VisibilityConverter(default_private=UploadType.PRIVATE)
    assert converter.visibility_to_upload_type("private") == UploadType.PRIVATE


def test_upload_type_to_visibility():
    converter = VisibilityConverter()
    assert converter.upload_type_to_visibility("upload") == Visibility.PUBLIC
    assert converter.upload_type_to_visibility("authenticated") == Visibility.PRIVATE
    assert converter.upload_type_to_visibility(UploadType.PRIVATE) == Visibility.PRIVATE


@pytest.mark.parametrize("default_private", [UploadType.AUTHENTICATED, UploadType.PRIVATE])
@pytest.mark.parametrize("visibility", ["public", "private"])
def test_round_trip_keeps_visibility(default_private, visibility):
    converter = VisibilityConverter(default_private=default_private)
    upload_type = converter.visibility_to_upload_type(visibility)
    assert converter.upload_type_to_visibility(upload_type) == visibility


def test_invalid_visibility_raises():
    with pytest.raises(InvalidVisibility, match="hidden"):
        VisibilityConverter().visibility_to_upload_type("hidden")


def test_invalid_upload_type_raises():
    with pytest.raises(InvalidVisibility):
        VisibilityConverter().upload_type_to_visibility("fetch")


def test_invalid_private_default_raises():
    with pytest.raises(InvalidConfigurationValue):
        VisibilityConverter(default_private=UploadType.UPLOAD)


def test_defaults():
    converter = VisibilityConverter()
    assert converter.default_upload_type() == UploadType.UPLOAD
    assert converter.default_visibility() == Visibility.PUBLIC


def test_coerce_visibility():
    assert coerce_visibility(None) == Visibility.PUBLIC
    assert coerce_visibility("private") == Visibility.PRIVATE
    with pytest.raises(InvalidVisibility):
        coerce_visibility("secret")
