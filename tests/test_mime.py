# tests/test_mime.py
from unittest.mock import patch

import pytest

from cloudinary_storage.enums import ResourceType
from cloudinary_storage.mime import MagicMimeTypeDetector, MimeTypeConverter


@pytest.mark.parametrize(
    "mime_type, expected",
    [
        ("image/png", ResourceType.IMAGE),
        ("application/pdf", ResourceType.IMAGE),
        ("application/postscript", ResourceType.IMAGE),
        ("model/gltf+json", ResourceType.IMAGE),
        ("model/obj", ResourceType.IMAGE),
        ("image/vnd.adobe.photoshop", ResourceType.IMAGE),
        ("video/mp4", ResourceType.VIDEO),
        ("application/vnd.apple.mpegurl", ResourceType.VIDEO),
        ("application/dash+xml", ResourceType.VIDEO),
        ("application/mxf", ResourceType.VIDEO),
        ("audio/mpeg", ResourceType.VIDEO),
        ("text/plain", ResourceType.RAW),
        ("application/zip", ResourceType.RAW),
        (None, ResourceType.RAW),
        ("", ResourceType.RAW),
    ],
)
def test_default_classification(mime_type, expected):
    assert MimeTypeConverter().mime_type_to_resource_type(mime_type) == expected


def test_image_list_is_checked_before_video():
    converter = MimeTypeConverter(image_types=["mp4"], video_types=["video"])
    assert converter.mime_type_to_resource_type("video/mp4") == ResourceType.IMAGE


def test_overrides_replace_default_lists():
    converter = MimeTypeConverter(image_types=[], video_types=[], audio_types=[])
    assert converter.mime_type_to_resource_type("image/png") == ResourceType.RAW

    converter = MimeTypeConverter(image_types=["text/csv"])
    assert converter.mime_type_to_resource_type("text/csv") == ResourceType.IMAGE
    assert converter.mime_type_to_resource_type("application/pdf") == ResourceType.RAW


def test_audio_is_uploaded_as_video():
    converter = MimeTypeConverter(audio_types=["audio", "ogg"])
    assert converter.mime_type_to_resource_type("application/ogg") == ResourceType.VIDEO


@pytest.mark.parametrize(
    "path, expected",
    [
        ("folder/photo.png", "image/png"),
        ("doc.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("clip.mp4", "video/mp4"),
        ("no_extension", None),
    ],
)
def test_extension_detector(path, expected):
    assert MagicMimeTypeDetector().detect_from_path(path) == expected


def test_magic_detector_sniffs_extensionless_file(tmp_path, png_bytes):
    local_file = tmp_path / "cloudinary_storage_abc123"
    local_file.write_bytes(png_bytes)
    assert MagicMimeTypeDetector().detect_from_local_file(local_file) == "image/png"


@patch("cloudinary_storage.mime.magic.from_file", return_value="application/octet-stream")
def test_magic_detector_falls_back_to_extension(mock_from_file, tmp_path):
    local_file = tmp_path / "picture.jpg"
    local_file.write_bytes(b"jpeg")
    assert MagicMimeTypeDetector().detect_from_local_file(str(local_file)) == "image/jpeg"
    mock_from_file.assert_called_once_with(str(local_file), mime=True)


@patch("cloudinary_storage.mime.magic.from_file", return_value="application/octet-stream")
def test_magic_detector_unknown_content_without_extension(mock_from_file, tmp_path):
    local_file = tmp_path / "blob"
    local_file.write_bytes(b"\x00\x01\x02")
    assert MagicMimeTypeDetector().detect_from_local_file(str(local_file)) is None
