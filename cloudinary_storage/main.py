# main.py
import logging
from typing import Optional

from . import log
from .adapter import CloudinaryAdapter
from .client import CloudinaryClient
from .config import Settings, get_settings
from .enums import UploadType
from .mime import MimeTypeConverter
from .visibility import VisibilityConverter


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configures console logging using the LOG_LEVEL setting."""
    settings = settings or get_settings()
    log.setup_logging(settings.LOG_LEVEL)


def initialize_adapter(settings: Optional[Settings] = None, verify: bool = False) -> CloudinaryAdapter:
    """
    Builds a CloudinaryAdapter wired from the application settings.

    :param settings: Settings to use, defaults to get_settings().
    :param verify: Ping the Admin API once to check the credentials.
    """
    settings = settings or get_settings()

    try:
        client = CloudinaryClient(settings.CLOUDINARY_URL, verify=verify)
    except Exception as e:
        logging.critical(f"Could not establish a connection to Cloudinary. Error: {e}", exc_info=True)
        raise

    adapter = CloudinaryAdapter(
        client,
        configuration=settings.to_configuration(),
        visibility_converter=VisibilityConverter(
            default_private=UploadType(settings.CLOUDINARY_PRIVATE_UPLOAD_TYPE)
        ),
        mime_type_converter=MimeTypeConverter(
            image_types=settings.CLOUDINARY_IMAGE_TYPES,
            video_types=settings.CLOUDINARY_VIDEO_TYPES,
            audio_types=settings.CLOUDINARY_AUDIO_TYPES,
        ),
        logger=logging.getLogger("cloudinary_storage"),
        logging_enabled=settings.LOGGING_ENABLED,
    )
    logging.info(f"Cloudinary adapter initialized for cloud [{client.cloud_name}].")
    return adapter
