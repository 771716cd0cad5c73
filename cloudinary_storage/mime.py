# mime.py
"""
Mime type detection and the mapping from mime types to Cloudinary resource types.

Matching is done on partial tokens because the detector does not know every
format Cloudinary accepts (3D models, camera RAW files, some CAD formats...).
The token lists can be replaced by callers to extend coverage.
"""
import mimetypes
import os
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

import magic

from .enums import ResourceType

DEFAULT_IMAGE_TYPES = (
    "image",
    "pdf",
    "postscript",
    "gltf",
    "model/obj",
    "x-photoshop",
    "model/vnd.usdz+zip",
)

DEFAULT_VIDEO_TYPES = (
    "video",
    "vnd.apple.mpegurl",
    "dash+xml",
    "mxf",
)

# Cloudinary expects audio to be uploaded through the video pipeline.
DEFAULT_AUDIO_TYPES = ("audio",)


class MimeTypeDetector(ABC):
    """Detects the mime type of a logical path or of a local file."""

    @abstractmethod
    def detect_from_path(self, path: str) -> Optional[str]:
        pass

    @abstractmethod
    def detect_from_local_file(self, path: str) -> Optional[str]:
        pass


class MagicMimeTypeDetector(MimeTypeDetector):
    """
    Logical paths are resolved through the interpreter's mimetypes registry.
    Local files are sniffed by content with libmagic, so temporary files
    without an extension still get a useful type.
    """

    # What libmagic reports for content it cannot identify.
    UNKNOWN_TYPES = ("application/octet-stream", "inode/x-empty")

    def __init__(self, strict: bool = False):
        self.strict = strict

    def detect_from_path(self, path: str) -> Optional[str]:
        mime_type, _ = mimetypes.guess_type(path, strict=self.strict)
        return mime_type

    def detect_from_local_file(self, path: Union[str, os.PathLike]) -> Optional[str]:
        path = os.fspath(path)
        mime_type = magic.from_file(path, mime=True)
        if not mime_type or mime_type in self.UNKNOWN_TYPES:
            return self.detect_from_path(path)
        return mime_type


class MimeTypeConverter:
    """
    Classifies mime types into image, video or raw.
    Lists are checked in order image -> video -> audio, first match wins.
    """

    def __init__(
        self,
        image_types: Optional[Sequence[str]] = None,
        video_types: Optional[Sequence[str]] = None,
        audio_types: Optional[Sequence[str]] = None,
    ):
        self.image_types = list(DEFAULT_IMAGE_TYPES if image_types is None else image_types)
        self.video_types = list(DEFAULT_VIDEO_TYPES if video_types is None else video_types)
        self.audio_types = list(DEFAULT_AUDIO_TYPES if audio_types is None else audio_types)

    def mime_type_to_resource_type(self, mime_type: Optional[str]) -> ResourceType:
        if not mime_type:
            return ResourceType.RAW

        if any(token in mime_type for token in self.image_types):
            return ResourceType.IMAGE
        if any(token in mime_type for token in self.video_types):
            return ResourceType.VIDEO
        if any(token in mime_type for token in self.audio_types):
            return ResourceType.VIDEO

        return ResourceType.RAW
