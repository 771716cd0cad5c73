# paths.py
"""
Translation between logical filesystem paths and Cloudinary public IDs.

Cloudinary has no "format" field for raw assets, so the extension is part of a
raw asset's public ID, while image and video public IDs never carry it.
"""
import posixpath
from typing import Tuple

from .enums import ResourceType


class PathPrefixer:
    """Adds and removes the configured root prefix of every remote path."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix.replace("\\", "/").strip("/")

    def prefix_path(self, path: str) -> str:
        path = path.lstrip("\\/")
        if not self.prefix:
            return path
        return f"{self.prefix}/{path}" if path else self.prefix

    def strip_prefix(self, path: str) -> str:
        if not self.prefix:
            return path
        if path == self.prefix:
            return ""
        if path.startswith(f"{self.prefix}/"):
            return path[len(self.prefix) + 1:]
        return path


class DirectoryParts:
    """
    Splits a path into its last segment and the folder holding it.
    Empty segments are discarded, so "a//b/" gives ("b", "a").
    """

    def __init__(self, path: str):
        parts = [part for part in path.split("/") if part]
        self.base_name = parts.pop() if parts else ""
        self.dir_name = "/".join(parts)

    def as_tuple(self) -> Tuple[str, str]:
        return self.base_name, self.dir_name


def split_path(path: str) -> Tuple[str, str]:
    """Returns (base_name, parent_dir_name) for a path."""
    return DirectoryParts(path).as_tuple()


def normalize_path(path: str, prefix: str = "", is_dir: bool = False) -> str:
    """
    Prefixes a path, converts backslashes and trims leading/trailing slashes.
    Directories get a single trailing slash.
    """
    path = PathPrefixer(prefix).prefix_path(path.replace("\\", "/"))
    path = path.strip("\\/")
    if is_dir:
        path = f"{path}/"
    return path


def public_id_for(path: str, resource_type: ResourceType, is_dir: bool = False) -> str:
    """
    Builds the public ID of an already normalized path.
    Directories are returned unchanged; raw files keep their extension.
    """
    if is_dir:
        return path

    stem, extension = posixpath.splitext(path)
    if resource_type == ResourceType.RAW:
        return path
    return stem if extension else path
