# storage/dto.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..enums import Visibility


class FileAttributes(BaseModel):
    """
    A standardized Data Transfer Object for file metadata, built from a
    Cloudinary asset descriptor.
    """

    path: str
    file_size: Optional[int] = None
    visibility: Optional[Visibility] = None
    last_modified: Optional[int] = None
    mime_type: Optional[str] = None
    extra_metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_file(self) -> bool:
        return True

    @property
    def is_dir(self) -> bool:
        return False


class DirectoryAttributes(BaseModel):
    """
    Cloudinary only reports a path for folders; size, timestamps and
    visibility are not available.
    """

    path: str

    @property
    def is_file(self) -> bool:
        return False

    @property
    def is_dir(self) -> bool:
        return True


StorageAttributes = Union[FileAttributes, DirectoryAttributes]


class WriteOptions(BaseModel):
    """
    Per-call options for write, write_stream, move and copy.

    Keys that are not declared here are kept and sent to Cloudinary verbatim,
    as are the entries of cloudinary_options.
    """

    model_config = ConfigDict(extra="allow")

    resource_type: Optional[str] = None
    public_id: Optional[str] = None
    upload_type: Optional[str] = None
    access_mode: Optional[str] = None
    access_control: List[Dict[str, Any]] = Field(default_factory=list)
    to_type: Optional[str] = None
    upload_preset: Optional[str] = None
    visibility: Optional[str] = None
    invalidate: bool = True
    overwrite: bool = True
    phash: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)
    backup: bool = False
    responsive_breakpoints: List[Dict[str, Any]] = Field(default_factory=list)
    auto_tagging: Optional[float] = None
    categorization: Optional[str] = None
    detection: Optional[str] = None
    auto_chaptering: bool = False
    auto_transcription: bool = False
    ocr: Optional[str] = None
    visual_search: bool = False
    eager: List[Any] = Field(default_factory=list)
    transformation: List[Any] = Field(default_factory=list)
    format: Optional[str] = None
    custom_coordinates: List[Any] = Field(default_factory=list)
    regions: Dict[str, Any] = Field(default_factory=dict)
    face_coordinates: List[Any] = Field(default_factory=list)
    background_removal: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    cloudinary_options: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, options: Union["WriteOptions", dict, None]) -> "WriteOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls(**options)

    def passthrough(self) -> Dict[str, Any]:
        """Unknown keys first, then cloudinary_options, so the explicit map wins."""
        return {**(self.model_extra or {}), **self.cloudinary_options}

    def to_dict(self) -> dict:
        return self.model_dump(exclude_defaults=True)


class ChecksumOptions(BaseModel):
    checksum_algo: str = "etag"

    @classmethod
    def coerce(cls, options: Union["ChecksumOptions", dict, None]) -> "ChecksumOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls(**options)
