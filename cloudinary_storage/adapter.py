# adapter.py
"""
Filesystem adapter for Cloudinary.

Cloudinary only looks like a filesystem from a distance: assets are split by
resource type (image, video, raw), access control is fixed at upload time,
folders are path prefixes and listing goes through two different APIs. The
adapter maps generic filesystem operations onto that model.
"""
import hashlib
import io
import logging
import os
import shutil
import tempfile
from datetime import datetime
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

import requests

from .client import NotFound
from .config import Configuration
from .enums import AccessMode, ResourceType, UploadType, Visibility
from .exceptions import (
    ChecksumFailed,
    CheckExistenceFailed,
    CopyFailed,
    CreateDirectoryFailed,
    DeleteDirectoryFailed,
    DeleteFailed,
    InvalidChecksumAlgorithm,
    InvalidConfigurationValue,
    InvalidVisibility,
    ListFailed,
    MetadataUnavailable,
    MoveFailed,
    ReadFailed,
    UrlGenerationFailed,
    VisibilityUnsupported,
    WriteFailed,
    describe,
)
from .log import AdapterLogger
from .mime import MagicMimeTypeDetector, MimeTypeConverter, MimeTypeDetector
from .paths import DirectoryParts, PathPrefixer, normalize_path, public_id_for
from .storage.base import FilesystemAdapter, Options
from .storage.dto import (
    ChecksumOptions,
    DirectoryAttributes,
    FileAttributes,
    StorageAttributes,
    WriteOptions,
)
from .visibility import VisibilityConverter, coerce_visibility

# Cloudinary accepts at most 100 public IDs per delete call.
DELETE_BATCH_SIZE = 100
# Max page size for the folders and search APIs.
MAX_RESULTS = 500
DOWNLOAD_CHUNK_SIZE = 1024 * 1024

DESCRIPTOR_FLAGS = {
    "colors": True,
    "media_metadata": True,
    "exif": True,
    "image_metadata": True,
    "faces": True,
    "quality_analysis": True,
    "accessibility_analysis": True,
    "phash": True,
    "coordinates": True,
    "pages": True,
    "versions": True,
    "related": True,
}

SEARCH_FIELDS = [
    "context",
    "tags",
    "metadata",
    "image_metadata",
    "image_analysis",
    "quality_analysis",
    "accessibility_analysis",
]

REQUIRED_METADATA = (
    "public_id",
    "url",
    "secure_url",
    "asset_id",
    "resource_type",
    "format",
    "type",
    "filename",
    "etag",
    "bytes",
)


class CloudinaryAdapter(FilesystemAdapter):
    """
    Adapter implementing the FilesystemAdapter interface on top of a Cloudinary
    client (see client.CloudinaryClient for the calls it relies on).
    """

    def __init__(
        self,
        client,
        configuration: Optional[Configuration] = None,
        visibility_converter: Optional[VisibilityConverter] = None,
        mime_type_detector: Optional[MimeTypeDetector] = None,
        mime_type_converter: Optional[MimeTypeConverter] = None,
        logger: Optional[logging.Logger] = None,
        logging_enabled: bool = False,
    ):
        self.client = client
        self.configuration = configuration
        self.visibility_converter = visibility_converter
        self.mime_type_detector = mime_type_detector
        self.mime_type_converter = mime_type_converter
        self.log = AdapterLogger(logger, logging_enabled, self._logging_context)

    # =========================================================================
    # Collaborators
    # =========================================================================

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @configuration.setter
    def configuration(self, configuration: Optional[Configuration]) -> None:
        self._configuration = configuration if configuration is not None else Configuration.default()

    @property
    def visibility_converter(self) -> VisibilityConverter:
        return self._visibility_converter

    @visibility_converter.setter
    def visibility_converter(self, converter: Optional[VisibilityConverter]) -> None:
        self._visibility_converter = converter if converter is not None else VisibilityConverter()

    @property
    def mime_type_detector(self) -> MimeTypeDetector:
        return self._mime_type_detector

    @mime_type_detector.setter
    def mime_type_detector(self, detector: Optional[MimeTypeDetector]) -> None:
        self._mime_type_detector = detector if detector is not None else MagicMimeTypeDetector()

    @property
    def mime_type_converter(self) -> MimeTypeConverter:
        return self._mime_type_converter

    @mime_type_converter.setter
    def mime_type_converter(self, converter: Optional[MimeTypeConverter]) -> None:
        self._mime_type_converter = converter if converter is not None else MimeTypeConverter()

    def set_logger(self, logger: Optional[logging.Logger]) -> "CloudinaryAdapter":
        self.log.set_logger(logger)
        return self

    def enable_logging(self) -> "CloudinaryAdapter":
        self.log.enable()
        return self

    def disable_logging(self) -> "CloudinaryAdapter":
        self.log.disable()
        return self

    @property
    def is_logging_enabled(self) -> bool:
        return self.log.is_enabled

    # =========================================================================
    # Existence
    # =========================================================================

    def file_exists(self, path: str) -> bool:
        resource_type = self._resource_type(path)
        public_id = self._public_id(path, resource_type)
        self.log.debug(
            f"Checking if [{path}] exists.",
            method="file_exists", path=path, public_id=public_id, resource_type=resource_type.value,
        )

        try:
            resource = self._describe_asset(public_id, resource_type)
        except NotFound as e:
            # Expected for missing files, so not logged as a failure.
            self.log.debug(
                f"File does not exist with message [{describe(e)}].",
                method="file_exists", path=path, public_id=public_id,
            )
            return False
        except Exception as e:
            self.log.critical(
                f"Failed to check for file existence with message [{describe(e)}].",
                method="file_exists", path=path, public_id=public_id, exception=e,
            )
            raise CheckExistenceFailed(path, describe(e)) from e

        return bool(resource and resource.get("secure_url"))

    def directory_exists(self, path: str) -> bool:
        self.log.debug(f"Checking if [{path}] exists.", method="directory_exists", path=path)
        normalized = self._normalize_path(path, is_dir=True)

        if normalized == "/":
            self.log.debug("Root directory will always exist on Cloudinary.", method="directory_exists")
            return True

        parts = DirectoryParts(normalized)
        try:
            for folder in self._subfolder_entries(parts.dir_name):
                if isinstance(folder, dict) and folder.get("name") == parts.base_name:
                    return True
        except Exception as e:
            self.log.critical(
                f"Failed to check for directory existence with message [{describe(e)}].",
                method="directory_exists", path=path, exception=e,
            )
            raise CheckExistenceFailed(path, describe(e)) from e

        self.log.debug(f"Directory [{path}] does not exist.", method="directory_exists", path=path)
        return False

    # =========================================================================
    # Writing
    # =========================================================================

    def write(self, path: str, contents: Union[bytes, str], options: Options = None) -> None:
        options = WriteOptions.coerce(options)
        self.log.debug(f"Writing file [{path}].", method="write", path=path, options=options.to_dict())

        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        if not contents:
            # Cloudinary rejects zero byte uploads.
            self.log.critical("Cannot upload empty contents.", method="write", path=path)
            raise WriteFailed(path, "Cannot upload empty contents.")

        temp_name = self._spool(path, io.BytesIO(contents), "write")
        try:
            with open(temp_name, "rb") as stream:
                self.write_stream(path, stream, options)
        finally:
            os.unlink(temp_name)

    def write_stream(self, path: str, stream: BinaryIO, options: Options = None) -> None:
        options = WriteOptions.coerce(options)
        self.log.debug(f"Writing (stream) file [{path}].", method="write_stream", path=path)

        # Options are validated before anything is sent to Cloudinary.
        visibility = coerce_visibility(options.visibility)
        upload_type = self._option_upload_type(options, visibility)

        source, spooled = self._local_source(path, stream)
        try:
            target = options.public_id or path
            resource_type = self._option_resource_type(options, target, source)
            upload_options = self._upload_options(options, target, visibility, upload_type, resource_type)
            self._remove_existing(path)

            try:
                self.client.upload(source, **upload_options)
            except Exception as e:
                self.log.critical(
                    f"Failed to write file [{path}] with message [{describe(e)}].",
                    method="write_stream", path=path, options=upload_options, exception=e,
                )
                raise WriteFailed(path, describe(e)) from e
        finally:
            if spooled:
                os.unlink(source)

    def _local_source(self, path: str, stream: BinaryIO) -> Tuple[str, bool]:
        """
        Returns (local file path, spooled). Real local files are uploaded from
        their own path; anything else is copied into a temporary file first.
        """
        name = getattr(stream, "name", None)
        if isinstance(name, (str, os.PathLike)) and os.path.isfile(name) and "b" in getattr(stream, "mode", "b"):
            if os.path.getsize(name) == 0:
                self.log.critical("Cannot upload empty contents.", method="write_stream", path=path)
                raise WriteFailed(path, "Cannot upload empty contents.")
            return os.fspath(name), False

        temp_name = self._spool(path, stream, "write_stream")
        if os.path.getsize(temp_name) == 0:
            os.unlink(temp_name)
            self.log.critical("Cannot upload empty contents.", method="write_stream", path=path)
            raise WriteFailed(path, "Cannot upload empty contents.")

        return temp_name, True

    def _spool(self, path: str, stream: BinaryIO, method: str) -> str:
        """Copies stream into a new temporary file; a partial file is removed on failure."""
        try:
            temp_file = tempfile.NamedTemporaryFile(prefix="cloudinary_storage_", delete=False)
        except OSError as e:
            self.log.critical("Failed to create temporary file.", method=method, path=path, exception=e)
            raise WriteFailed(path, f"Failed to create temporary file: {describe(e)}") from e

        try:
            with temp_file:
                shutil.copyfileobj(stream, temp_file, DOWNLOAD_CHUNK_SIZE)
        except (OSError, TypeError, ValueError) as e:
            os.unlink(temp_file.name)
            self.log.critical(
                f"Failed to read stream for [{path}] with message [{describe(e)}].",
                method=method, path=path, exception=e,
            )
            raise WriteFailed(path, f"Failed to read stream: {describe(e)}") from e

        return temp_file.name

    def _remove_existing(self, path: str) -> None:
        """
        Overwriting with a different access type makes Cloudinary keep both
        assets, so an existing file is deleted before the upload.
        """
        try:
            exists = self.file_exists(path)
        except Exception as e:
            message = f"Failed to check for existing file [{path}] with message [{describe(e)}]."
            self.log.critical(message, method="write_stream", path=path, exception=e)
            raise WriteFailed(path, message) from e

        if not exists:
            return

        self.log.debug(
            f"File currently exists at [{path}], deleting so we can overwrite with new stream.",
            method="write_stream", path=path,
        )
        try:
            self.delete(path)
        except Exception as e:
            message = f"Failed to delete existing file [{path}] with message [{describe(e)}]."
            self.log.critical(message, method="write_stream", path=path, exception=e)
            raise WriteFailed(path, message) from e

    def _option_upload_type(self, options: WriteOptions, visibility: Visibility) -> UploadType:
        if options.upload_type is None:
            return self.visibility_converter.visibility_to_upload_type(visibility)
        try:
            return UploadType(options.upload_type)
        except ValueError:
            expected = ", ".join(member.value for member in UploadType)
            raise InvalidVisibility(options.upload_type, f"one of [{expected}]") from None

    def _option_resource_type(
        self, options: WriteOptions, target: str, source: Optional[str] = None
    ) -> ResourceType:
        if options.resource_type is not None:
            try:
                return ResourceType(options.resource_type)
            except ValueError:
                raise InvalidConfigurationValue(
                    f"Invalid resource type [{options.resource_type}]. Must be one of [image, video, raw]."
                ) from None

        mime_type = self.mime_type_detector.detect_from_path(target)
        if mime_type is None and source is not None:
            mime_type = self.mime_type_detector.detect_from_local_file(source)
        return self.mime_type_converter.mime_type_to_resource_type(mime_type)

    def _upload_options(
        self,
        options: WriteOptions,
        target: str,
        visibility: Visibility,
        upload_type: UploadType,
        resource_type: ResourceType,
    ) -> Dict[str, Any]:
        public_id = self._public_id(target, resource_type)
        # Cloudinary prefixes the public ID with the folder, so only the base name is sent.
        parts = DirectoryParts(public_id)

        upload_options = {
            **self._write_options(options, visibility),
            "public_id": parts.base_name,
            "resource_type": resource_type.value,
            "type": upload_type.value,
            "folder": parts.dir_name,
            "asset_folder": parts.dir_name,
        }

        if resource_type == ResourceType.RAW:
            upload_options["filename_override"] = parts.base_name
        elif resource_type == ResourceType.IMAGE:
            upload_options.update(self._image_write_options(options))
        elif resource_type == ResourceType.VIDEO:
            upload_options.update(self._video_write_options(options))

        self.log.debug(
            "Resolved Cloudinary upload parameters.",
            method="write_stream", options=upload_options, resource_type=resource_type.value,
        )
        return upload_options

    def _write_options(self, options: WriteOptions, visibility: Visibility) -> Dict[str, Any]:
        result: Dict[str, Any] = {}

        if options.access_mode is not None:
            result["access_mode"] = options.access_mode
        elif visibility == Visibility.PUBLIC:
            result["access_mode"] = AccessMode.PUBLIC.value
        else:
            result["access_mode"] = AccessMode.AUTHENTICATED.value

        upload_preset = options.upload_preset or self.configuration.upload_preset
        if upload_preset:
            result["upload_preset"] = upload_preset

        for flag in ("overwrite", "invalidate", "backup"):
            if getattr(options, flag):
                result[flag] = True

        for key in ("metadata", "tags", "context", "headers", "eager", "transformation", "access_control"):
            value = getattr(options, key)
            if value:
                result[key] = value

        result.update(options.passthrough())
        return result

    def _image_write_options(self, options: WriteOptions) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if options.phash:
            result["phash"] = True
        if options.visual_search:
            result["visual_search"] = True
        if _valid_auto_tagging(options.auto_tagging):
            result["auto_tagging"] = options.auto_tagging

        for key in (
            "format",
            "categorization",
            "detection",
            "ocr",
            "background_removal",
            "responsive_breakpoints",
            "face_coordinates",
            "regions",
            "custom_coordinates",
        ):
            value = getattr(options, key)
            if value:
                result[key] = value
        return result

    def _video_write_options(self, options: WriteOptions) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if _valid_auto_tagging(options.auto_tagging):
            result["auto_tagging"] = options.auto_tagging
        if options.categorization:
            result["categorization"] = options.categorization
        if options.auto_chaptering:
            result["auto_chaptering"] = True
        if options.auto_transcription:
            result["auto_transcription"] = True
        return result

    # =========================================================================
    # Reading
    # =========================================================================

    def read(self, path: str) -> bytes:
        self.log.debug(f"Reading [{path}].", method="read", path=path)
        url = self._secure_url(path, "read")

        try:
            response = requests.get(url)
            response.raise_for_status()
        except requests.RequestException as e:
            message = f"Failed to read contents from URI [{url}]."
            self.log.critical(message, method="read", path=path, exception=e)
            raise ReadFailed(path, message) from e
        return response.content

    def read_stream(self, path: str) -> BinaryIO:
        self.log.debug(f"Reading (stream) [{path}].", method="read_stream", path=path)
        url = self._secure_url(path, "read_stream")

        response = None
        try:
            response = requests.get(url, stream=True)
            response.raise_for_status()
        except requests.RequestException as e:
            if response is not None:
                response.close()
            message = f"Failed to open file from URI [{url}]."
            self.log.critical(message, method="read_stream", path=path, exception=e)
            raise ReadFailed(path, message) from e

        response.raw.decode_content = True
        return response.raw

    def _secure_url(self, path: str, method: str) -> str:
        try:
            resource = self._describe(path)
        except Exception as e:
            self.log.critical(
                f"Failed to get resource [{path}] with message [{describe(e)}].",
                method=method, path=path, exception=e,
            )
            raise ReadFailed(path, describe(e)) from e

        url = resource.get("secure_url") if resource else None
        if not url:
            self.log.critical(f"No URL returned for [{path}].", method=method, path=path)
            raise ReadFailed(path, "No URL returned for resource.")
        return url

    # =========================================================================
    # Deleting
    # =========================================================================

    def delete(self, path: str) -> None:
        self.log.debug(f"Deleting [{path}].", method="delete", path=path)

        try:
            exists = self.file_exists(path)
        except CheckExistenceFailed as e:
            self.log.critical(f"Failed to delete [{path}].", method="delete", path=path, exception=e)
            raise DeleteFailed(path, describe(e)) from e

        if not exists:
            self.log.debug(f"Resource [{path}] does not exist. Skipping delete.", method="delete", path=path)
            return

        resource_type = self._resource_type(path)
        public_id = self._public_id(path, resource_type)
        self._delete_resource(path, public_id, resource_type)

    def _delete_resource(self, path: str, public_id: str, resource_type: ResourceType) -> None:
        for upload_type in UploadType:
            self.log.debug(
                f"Attempt to delete resource [{public_id}] with type '{upload_type.value}'.",
                method="delete", public_id=public_id, resource_type=resource_type.value,
            )
            if self._delete_resource_call(path, public_id, resource_type, upload_type):
                return

        self.log.critical(
            f"Failed to delete resource at [{path}]. Resource not found.",
            method="delete", public_id=public_id, resource_type=resource_type.value,
        )
        raise DeleteFailed(path, "Resource not found for any upload type.")

    def _delete_resource_call(
        self, path: str, public_id: str, resource_type: ResourceType, upload_type: UploadType
    ) -> bool:
        try:
            response = self.client.delete_assets(
                [public_id],
                resource_type=resource_type.value,
                invalidate=True,
                type=upload_type.value,
            )
        except Exception as e:
            self.log.error(
                f"Unable to delete resource [{public_id}] with message [{describe(e)}].",
                method="delete", public_id=public_id, upload_type=upload_type.value, exception=e,
            )
            raise DeleteFailed(path, describe(e)) from e

        deleted = (response or {}).get("deleted") or {}
        if deleted.get(public_id) != "deleted":
            self.log.warning(
                f"Failed to successfully delete [{public_id}] for upload type [{upload_type.value}].",
                method="delete", public_id=public_id, upload_type=upload_type.value,
            )
            return False
        return True

    def delete_directory(self, path: str) -> None:
        self.log.debug(f"Deleting directory [{path}].", method="delete_directory", path=path)
        directory = self._normalize_path(path, is_dir=True)
        folder = directory.rstrip("/")

        # Only files are collected; deleting the folder afterwards removes the
        # (then empty) nested folders too.
        try:
            resources = list(self._all_files(folder, deep=True))
        except Exception as e:
            self.log.critical(
                f"Failed to get resources for [{path}] with message [{describe(e)}].",
                method="delete_directory", path=path, exception=e,
            )
            raise DeleteDirectoryFailed(path, describe(e)) from e

        buckets: Dict[ResourceType, List[str]] = {resource_type: [] for resource_type in ResourceType}
        for resource in resources:
            resource_type, public_id = self._listed_identifier(resource)
            buckets[resource_type].append(public_id)

        for resource_type, public_ids in buckets.items():
            try:
                self._delete_resources(path, public_ids, resource_type)
            except DeleteFailed as e:
                self.log.critical(
                    f"Failed to delete resources with message [{describe(e)}].",
                    method="delete_directory", path=path, exception=e,
                )
                raise DeleteDirectoryFailed(path, describe(e)) from e

        if folder == "":
            self.log.debug("Root folder is never deleted.", method="delete_directory", path=path)
            return

        try:
            self.client.delete_folder(directory)
        except NotFound as e:
            self.log.debug(
                f"Folder [{directory}] does not exist with message [{describe(e)}].",
                method="delete_directory", path=path,
            )
        except Exception as e:
            self.log.critical(
                f"Failed to delete directory [{path}] with message [{describe(e)}].",
                method="delete_directory", path=path, exception=e,
            )
            raise DeleteDirectoryFailed(path, describe(e)) from e

    def _listed_identifier(self, resource: FileAttributes) -> Tuple[ResourceType, str]:
        """Resource type and public ID of a listed file, as reported by Cloudinary."""
        metadata = resource.extra_metadata
        try:
            resource_type = ResourceType(metadata.get("resource_type"))
        except ValueError:
            resource_type = self._resource_type(resource.path)
        public_id = metadata.get("public_id") or self._public_id(resource.path, resource_type)
        return resource_type, public_id

    def _delete_resources(self, path: str, public_ids: List[str], resource_type: ResourceType) -> None:
        for start in range(0, len(public_ids), DELETE_BATCH_SIZE):
            failed = public_ids[start:start + DELETE_BATCH_SIZE]
            for upload_type in UploadType:
                failed = self._delete_resources_call(failed, resource_type, upload_type)
                if not failed:
                    break
            else:
                message = f"Failed to delete [{', '.join(failed)}] for resource type [{resource_type.value}]."
                self.log.error(
                    message, method="delete_directory", failed_deletes=failed, resource_type=resource_type.value
                )
                raise DeleteFailed(path, message)

    def _delete_resources_call(
        self, public_ids: List[str], resource_type: ResourceType, upload_type: UploadType
    ) -> List[str]:
        """Returns the public IDs that still need deleting."""
        try:
            response = self.client.delete_assets(
                public_ids,
                resource_type=resource_type.value,
                invalidate=True,
                type=upload_type.value,
            )
        except Exception as e:
            self.log.error(
                f"Unable to delete files with message [{describe(e)}].",
                method="delete_directory", public_ids=public_ids, upload_type=upload_type.value, exception=e,
            )
            return list(public_ids)

        deleted = (response or {}).get("deleted")
        if not isinstance(deleted, dict):
            self.log.warning(
                "Received an invalid API response trying to delete batch of resources.",
                method="delete_directory", public_ids=public_ids, upload_type=upload_type.value,
            )
            return list(public_ids)

        failed = [public_id for public_id, status in deleted.items() if status == "not_found"]
        if failed:
            self.log.warning(
                f"Failed to delete resources [{', '.join(failed)}].",
                method="delete_directory", failed_deletes=failed, upload_type=upload_type.value,
            )
        return failed

    # =========================================================================
    # Directories and visibility
    # =========================================================================

    def create_directory(self, path: str, options: Options = None) -> None:
        self.log.debug(f"Creating directory [{path}].", method="create_directory", path=path)
        directory = self._normalize_path(path, is_dir=True)

        try:
            self.client.create_folder(directory)
        except Exception as e:
            self.log.critical(
                f"Failed to create directory [{directory}] with message [{describe(e)}].",
                method="create_directory", path=path, exception=e,
            )
            raise CreateDirectoryFailed(path, describe(e)) from e

    def set_visibility(self, path: str, visibility: str) -> None:
        # Cloudinary has no API to change the access type of an uploaded asset.
        self.log.critical(
            "Visibility modification is unsupported for this adapter.",
            method="set_visibility", path=path, visibility=visibility,
        )
        raise VisibilityUnsupported(path, f"{type(self).__name__} does not support modifying visibility.")

    # =========================================================================
    # Metadata
    # =========================================================================

    def get_metadata(self, path: str) -> FileAttributes:
        return self._file_metadata(path, "metadata")

    def visibility(self, path: str) -> Visibility:
        return self._attribute(path, "visibility")

    def mime_type(self, path: str) -> str:
        return self._attribute(path, "mime_type")

    def last_modified(self, path: str) -> int:
        return self._attribute(path, "last_modified")

    def file_size(self, path: str) -> int:
        return self._attribute(path, "file_size")

    def _attribute(self, path: str, attribute: str):
        self.log.debug(f"Getting {attribute} for [{path}].", method=attribute, path=path)
        value = getattr(self._file_metadata(path, attribute), attribute)
        if value is None:
            self.log.critical(f"Failed to retrieve {attribute} for [{path}].", method=attribute, path=path)
            raise MetadataUnavailable(path, attribute)
        return value

    def _file_metadata(self, path: str, attribute: str) -> FileAttributes:
        try:
            resource = self._describe(path)
            attributes = self._map_file_metadata(resource, self._normalize_path(path))
        except Exception as e:
            self.log.error(
                f"Failed to get resource metadata with message [{describe(e)}].",
                method=attribute, path=path, exception=e,
            )
            raise MetadataUnavailable(path, attribute, describe(e)) from e

        if attributes.mime_type is None:
            self.log.error("Unknown mimetype detected.", method=attribute, path=path)
            raise MetadataUnavailable(path, attribute, "Unknown mimetype detected.")
        return attributes

    def checksum(self, path: str, options: Union[ChecksumOptions, dict, None] = None) -> str:
        algorithm = ChecksumOptions.coerce(options).checksum_algo
        if algorithm != "etag" and algorithm not in hashlib.algorithms_available:
            raise InvalidChecksumAlgorithm(algorithm)

        self.log.debug(
            f"Getting checksum for [{path}] with algo [{algorithm}].",
            method="checksum", path=path, checksum_algo=algorithm,
        )

        try:
            metadata = self._file_metadata(path, "checksum").extra_metadata
        except MetadataUnavailable as e:
            self.log.critical(
                f"Failed to provide checksum for [{path}] with message [{describe(e)}].",
                method="checksum", path=path, exception=e,
            )
            raise ChecksumFailed(path, describe(e)) from e

        if algorithm == "etag":
            etag = metadata.get("etag")
            if not isinstance(etag, str) or not etag:
                self.log.critical(f"Invalid etag found [{etag}].", method="checksum", path=path)
                raise ChecksumFailed(path, f"Invalid etag found [{etag}].")
            return etag

        url = metadata.get("secure_url") or metadata.get("url")
        if not url:
            self.log.critical(f"Invalid URL found [{url}].", method="checksum", path=path)
            raise ChecksumFailed(path, f"Invalid URL found [{url}].")

        digest = hashlib.new(algorithm)
        try:
            with requests.get(url, stream=True) as response:
                response.raise_for_status()
                for chunk in response.iter_content(DOWNLOAD_CHUNK_SIZE):
                    digest.update(chunk)
        except requests.RequestException as e:
            self.log.critical(
                f"Failed to provide checksum for [{path}] with message [{describe(e)}].",
                method="checksum", path=path, exception=e,
            )
            raise ChecksumFailed(path, describe(e)) from e

        # SHAKE digests need an explicit length.
        if algorithm.startswith("shake_"):
            return digest.hexdigest(int(algorithm.split("_")[1]) // 4)
        return digest.hexdigest()

    def public_url(self, path: str, options: Optional[dict] = None) -> str:
        self.log.debug(f"Getting public URL for [{path}].", method="public_url", path=path)

        try:
            metadata = self._file_metadata(path, "public_url").extra_metadata
        except MetadataUnavailable as e:
            self.log.critical(
                f"Failed to generate public URL for [{path}] with message [{describe(e)}].",
                method="public_url", path=path, exception=e,
            )
            raise UrlGenerationFailed(path, describe(e)) from e

        url = metadata.get("secure_url") or metadata.get("url")
        if not isinstance(url, str) or not url:
            self.log.critical(f"Failed to generate public URL for [{path}].", method="public_url", path=path)
            raise UrlGenerationFailed(path, "URL not found.")
        return url

    # =========================================================================
    # Listing
    # =========================================================================

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """
        Lazily lists folders first, then files. Each call starts a fresh
        listing and a page is only fetched once the previous one is consumed.
        """
        self.log.debug(f"Listing contents for [{path}].", method="list_contents", path=path, deep=deep)
        directory = self._normalize_path(path, is_dir=True).rstrip("/")

        yield from self._all_folders(directory, deep)
        yield from self._all_files(directory, deep)

    def _all_folders(self, path: str, deep: bool) -> Iterator[DirectoryAttributes]:
        try:
            yield from self._folders(path, deep)
        except Exception as e:
            self.log.critical(
                f"Failed to get Cloudinary folders with message [{describe(e)}].",
                method="list_contents", path=path, deep=deep, exception=e,
            )
            raise ListFailed(path, describe(e)) from e

    def _all_files(self, path: str, deep: bool) -> Iterator[FileAttributes]:
        try:
            yield from self._files(path, deep)
        except Exception as e:
            self.log.critical(
                f"Failed to get Cloudinary resources with message [{describe(e)}].",
                method="list_contents", path=path, deep=deep, exception=e,
            )
            raise ListFailed(path, describe(e)) from e

    def _subfolder_entries(self, path: str) -> Iterator[dict]:
        """Raw folder entries under path, following next_cursor page by page."""
        cursor = None
        while True:
            self.log.debug(
                "Fetching folders from Cloudinary Admin API.",
                method="list_contents", path=path, next_cursor=cursor,
            )
            try:
                response = self.client.subfolders(path, next_cursor=cursor, max_results=MAX_RESULTS)
            except NotFound:
                self.log.debug("Resource not found.", method="list_contents", path=path)
                return

            folders = (response or {}).get("folders")
            if not isinstance(folders, list):
                self.log.warning("No folders found.", method="list_contents", path=path)
                return

            yield from folders

            cursor = response.get("next_cursor")
            if not cursor:
                return

    def _folders(self, path: str, deep: bool) -> Iterator[DirectoryAttributes]:
        for folder in self._subfolder_entries(path):
            folder_path = folder.get("path") if isinstance(folder, dict) else None
            if not isinstance(folder_path, str):
                self.log.warning("Folder does not contain a valid path.", method="list_contents", folder=folder)
                continue

            yield self._map_directory(folder_path)

            if deep:
                self.log.debug(f"Recursing into folder [{folder_path}].", method="list_contents")
                yield from self._folders(folder_path, deep)

    def _files(self, path: str, deep: bool) -> Iterator[FileAttributes]:
        expression = "(resource_type:image OR resource_type:video OR resource_type:raw)"
        if path != "":
            expression = f"{expression} AND public_id={path}/*"

        cursor = None
        while True:
            self.log.debug(
                "Fetching resources from Cloudinary Search API.",
                method="list_contents", path=path, next_cursor=cursor, search_query=expression,
            )
            try:
                response = self.client.search(
                    expression, SEARCH_FIELDS, ("public_id", "asc"), MAX_RESULTS, cursor
                )
            except NotFound:
                self.log.debug("Resource(s) not found.", method="list_contents", path=path)
                return

            response = response or {}
            resources = response.get("resources")
            if isinstance(resources, list):
                yield from self._process_resources(resources, path, deep)
            else:
                self.log.warning("No resources found.", method="list_contents", path=path)

            cursor = response.get("next_cursor")
            if not cursor:
                return

    def _process_resources(self, resources: List[dict], path: str, deep: bool) -> Iterator[FileAttributes]:
        for resource in resources:
            public_id = resource.get("public_id") if isinstance(resource, dict) else None
            if not public_id:
                self.log.debug("Invalid resource with no public_id set, skipping resource.", resource=resource)
                continue

            if not deep:
                relative = public_id[len(path):] if path and public_id.startswith(path) else public_id
                if "/" in relative.lstrip("/"):
                    self.log.debug(f"Deep not set, skipping nested file [{public_id}].", method="list_contents")
                    continue

            # Raw assets keep their extension in the public ID and have no format.
            file_format = resource.get("format")
            if resource.get("resource_type") != ResourceType.RAW.value and file_format:
                filename = f"{public_id}.{file_format}"
            else:
                filename = public_id

            yield self._map_file_metadata(resource, filename)

    # =========================================================================
    # Move and copy
    # =========================================================================

    def move(self, source: str, destination: str, options: Options = None) -> None:
        options = WriteOptions.coerce(options)
        self.log.debug(
            f"Moving [{source}] to [{destination}].", method="move", source=source, destination=destination
        )

        visibility = coerce_visibility(options.visibility) if options.visibility is not None else None
        requested_to_type = self._to_type(options.to_type) if options.to_type is not None else None

        # The source's current upload type is needed for the rename call.
        try:
            metadata = self._file_metadata(source, "extra_metadata").extra_metadata
        except MetadataUnavailable as e:
            self.log.critical(
                f"Unable to move file with message [{describe(e)}].",
                method="move", source=source, destination=destination, exception=e,
            )
            raise MoveFailed(source, destination, describe(e)) from e

        try:
            resource_type = ResourceType(metadata.get("resource_type"))
        except ValueError:
            resource_type = self._resource_type(source)

        if metadata.get("type"):
            upload_type = UploadType(metadata["type"])
        else:
            upload_type = self.visibility_converter.visibility_to_upload_type(visibility or Visibility.PUBLIC)

        if requested_to_type is not None:
            to_type = requested_to_type
        elif visibility is not None:
            to_type = self.visibility_converter.visibility_to_upload_type(visibility)
        else:
            to_type = upload_type

        source_id = self._public_id(source, resource_type)
        destination_id = self._public_id(destination, resource_type)

        rename_options = {
            "invalidate": options.invalidate,
            "resource_type": resource_type.value,
            "overwrite": options.overwrite,
            "to_type": to_type.value,
            "type": upload_type.value,
        }
        if options.metadata:
            rename_options["metadata"] = options.metadata
        if options.context:
            rename_options["context"] = options.context

        try:
            response = self.client.rename(source_id, destination_id, **rename_options)
        except Exception as e:
            self.log.critical(
                f"Failed to move [{source_id}] to [{destination_id}] with exception [{describe(e)}].",
                method="move", source=source, destination=destination, exception=e,
            )
            raise MoveFailed(source, destination, describe(e)) from e

        if (response or {}).get("public_id") != destination_id:
            self.log.critical(
                f"Failed to move [{source_id}] to [{destination_id}].",
                method="move", source=source, destination=destination,
            )
            raise MoveFailed(source, destination, "Rename returned an unexpected public ID.")

    def _to_type(self, value: str) -> UploadType:
        """to_type may be given as a visibility or as an upload type."""
        if value in (Visibility.PUBLIC.value, Visibility.PRIVATE.value):
            return self.visibility_converter.visibility_to_upload_type(value)
        try:
            return UploadType(value)
        except ValueError:
            raise InvalidVisibility(value, "a visibility or one of [upload, authenticated, private]") from None

    def copy(self, source: str, destination: str, options: Options = None) -> None:
        options = WriteOptions.coerce(options)
        self.log.debug(
            f"Copying [{source}] to [{destination}].", method="copy", source=source, destination=destination
        )
        resource_type = self._resource_type(source)

        try:
            stream = self.read_stream(source)
        except Exception as e:
            self.log.critical(
                f"Failed to copy [{source}] to [{destination}] with exception [{describe(e)}].",
                method="copy", source=source, destination=destination, exception=e,
            )
            raise CopyFailed(source, destination, describe(e)) from e

        # The copy keeps the source's resource type whatever its new name suggests.
        options = options.model_copy(update={"resource_type": resource_type.value})
        try:
            self.write_stream(destination, stream, options)
        except Exception as e:
            self.log.critical(
                f"Failed to copy [{source}] to [{destination}] with exception [{describe(e)}].",
                method="copy", source=source, destination=destination, exception=e,
            )
            raise CopyFailed(source, destination, describe(e)) from e
        finally:
            stream.close()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _normalize_path(self, path: str, is_dir: bool = False) -> str:
        return normalize_path(path, self.configuration.prefix, is_dir)

    def _public_id(self, path: str, resource_type: ResourceType, is_dir: bool = False) -> str:
        return public_id_for(self._normalize_path(path, is_dir), resource_type, is_dir)

    def _resource_type(self, path: str) -> ResourceType:
        mime_type = self.mime_type_detector.detect_from_path(path)
        return self.mime_type_converter.mime_type_to_resource_type(mime_type)

    def _describe(self, path: str) -> dict:
        resource_type = self._resource_type(path)
        return self._describe_asset(self._public_id(path, resource_type), resource_type)

    def _describe_asset(self, public_id: str, resource_type: ResourceType) -> dict:
        """
        Fetches an asset descriptor, trying every upload type in turn.
        Raises NotFound if no upload type knows the asset.
        """
        not_found = None
        for upload_type in UploadType:
            try:
                return self.client.asset(
                    public_id, resource_type=resource_type.value, type=upload_type.value, **DESCRIPTOR_FLAGS
                )
            except NotFound as e:
                not_found = e
        raise not_found

    def _map_file_metadata(self, data: dict, path: str) -> FileAttributes:
        path = PathPrefixer(self.configuration.prefix).strip_prefix(path)

        if data.get("type"):
            visibility = self.visibility_converter.upload_type_to_visibility(data["type"])
        else:
            visibility = self.visibility_converter.default_visibility()

        extra_metadata = {key: data.get(key, "") for key in REQUIRED_METADATA}
        for field in self.configuration.extra_metadata_fields:
            if data.get(field) not in (None, ""):
                extra_metadata[field] = data[field]

        return FileAttributes(
            path=path,
            file_size=data.get("bytes"),
            visibility=visibility,
            last_modified=_timestamp(data.get("created_at")),
            mime_type=self.mime_type_detector.detect_from_path(path),
            extra_metadata=extra_metadata,
        )

    def _map_directory(self, path: str) -> DirectoryAttributes:
        path = PathPrefixer(self.configuration.prefix).strip_prefix(path.rstrip("/"))
        return DirectoryAttributes(path=path)

    def _logging_context(self) -> dict:
        return {
            "class": type(self).__name__,
            "configuration": self.configuration.to_dict(),
            "mime_type_detector": type(self.mime_type_detector).__name__,
            "visibility_converter": type(self.visibility_converter).__name__,
            "mime_type_converter": type(self.mime_type_converter).__name__,
            "cloud_name": getattr(self.client, "cloud_name", None),
        }


def _valid_auto_tagging(value: Optional[float]) -> bool:
    return value is not None and 0.0 <= value < 1.0


def _timestamp(value) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None
