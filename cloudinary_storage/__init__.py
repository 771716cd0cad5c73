from .adapter import CloudinaryAdapter
from .client import CloudinaryClient
from .config import Configuration, Settings, get_settings
from .enums import AccessMode, MetadataField, ResourceType, UploadType, Visibility
from .mime import MagicMimeTypeDetector, MimeTypeConverter, MimeTypeDetector
from .storage.dto import ChecksumOptions, DirectoryAttributes, FileAttributes, WriteOptions
from .visibility import VisibilityConverter

__all__ = [
    "AccessMode",
    "ChecksumOptions",
    "CloudinaryAdapter",
    "CloudinaryClient",
    "Configuration",
    "DirectoryAttributes",
    "FileAttributes",
    "MagicMimeTypeDetector",
    "MetadataField",
    "MimeTypeConverter",
    "MimeTypeDetector",
    "ResourceType",
    "Settings",
    "UploadType",
    "Visibility",
    "VisibilityConverter",
    "WriteOptions",
    "get_settings",
]
