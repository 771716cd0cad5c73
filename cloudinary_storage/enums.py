# enums.py
from enum import Enum


class ResourceType(str, Enum):
    """Partition every remote asset belongs to."""

    IMAGE = "image"
    VIDEO = "video"
    RAW = "raw"


class UploadType(str, Enum):
    """
    Access-control tag assigned to an asset at upload time.
    The order of the members is the order delete fallbacks are attempted in.
    """

    UPLOAD = "upload"
    AUTHENTICATED = "authenticated"
    PRIVATE = "private"


class AccessMode(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class MetadataField(str, Enum):
    """Extra descriptor fields that can be copied into FileAttributes.extra_metadata."""

    FOLDER = "folder"
    ASSET_FOLDER = "asset_folder"
    WIDTH = "width"
    HEIGHT = "height"
    ACCESS_MODE = "access_mode"
    TAGS = "tags"
    IMAGE_METADATA = "image_metadata"
    ASSET_ID = "asset_id"
    VERSION = "version"
    PHASH = "phash"
    QUALITY_ANALYSIS = "quality_analysis"
    QUALITY_SCORE = "quality_score"
    ACCESSIBILITY_ANALYSIS = "accessibility_analysis"
    MEDIA_METADATA = "media_metadata"
    FACES = "faces"
    COLORS = "colors"
    NEXT_CURSOR = "next_cursor"
    EMBEDDED_IMAGES = "embedded_images"
    ILLUSTRATION_SCORE = "illustration_score"
    RELATED_ASSETS = "related_assets"
    SEMI_TRANSPARENT = "semi_transparent"
    GRAYSCALE = "grayscale"
    PREDOMINANT = "predominant"
    USAGE = "usage"
    ORIGINAL_FILENAME = "original_filename"
    PIXELS = "pixels"
    PAGES = "pages"
    ASPECT_RATIO = "aspect_ratio"
    CREATED_AT = "created_at"
    UPLOADED_AT = "uploaded_at"
    STATUS = "status"
    ACCESS_CONTROL = "access_control"
    CREATED_BY = "created_by"
    UPLOADED_BY = "uploaded_by"
    CINEMAGRAPH_ANALYSIS = "cinemagraph_analysis"
