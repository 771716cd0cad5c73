# storage/base.py
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Optional, Union

from .dto import ChecksumOptions, FileAttributes, StorageAttributes, WriteOptions

Options = Union[WriteOptions, dict, None]


class FilesystemAdapter(ABC):
    """
    Abstract base class for a filesystem adapter.
    Defines the generic file and directory operations that a storage backend
    (e.g. Cloudinary) must map onto its own API.
    """

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """
        Checks whether a file exists.

        :param path: Logical path of the file.
        :return: True if the file exists, False otherwise.
        """
        pass

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        """
        Checks whether a directory exists.

        :param path: Logical path of the directory.
        """
        pass

    @abstractmethod
    def write(self, path: str, contents: bytes, options: Options = None) -> None:
        """
        Writes contents to a file, replacing any existing file.

        :param path: Logical path of the file.
        :param contents: The bytes (or text) to write.
        :param options: Per-call write options.
        """
        pass

    @abstractmethod
    def write_stream(self, path: str, stream: BinaryIO, options: Options = None) -> None:
        """
        Writes the contents of a readable binary stream to a file.

        :param path: Logical path of the file.
        :param stream: A readable binary file-like object.
        :param options: Per-call write options.
        """
        pass

    @abstractmethod
    def read(self, path: str) -> bytes:
        """
        Reads a file.

        :param path: Logical path of the file.
        :return: The file contents.
        """
        pass

    @abstractmethod
    def read_stream(self, path: str) -> BinaryIO:
        """
        Opens a file for reading.

        :param path: Logical path of the file.
        :return: A readable binary file-like object.
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Deletes a file. Deleting a missing file is not an error.

        :param path: Logical path of the file.
        """
        pass

    @abstractmethod
    def delete_directory(self, path: str) -> None:
        """
        Deletes a directory and everything below it.

        :param path: Logical path of the directory.
        """
        pass

    @abstractmethod
    def create_directory(self, path: str, options: Options = None) -> None:
        """
        Creates a directory.

        :param path: Logical path of the directory.
        :param options: Per-call options.
        """
        pass

    @abstractmethod
    def set_visibility(self, path: str, visibility: str) -> None:
        pass

    @abstractmethod
    def visibility(self, path: str) -> str:
        pass

    @abstractmethod
    def mime_type(self, path: str) -> str:
        pass

    @abstractmethod
    def last_modified(self, path: str) -> int:
        pass

    @abstractmethod
    def file_size(self, path: str) -> int:
        pass

    @abstractmethod
    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """
        Lists the contents of a directory.

        :param path: Logical path of the directory ("" for the root).
        :param deep: If True, include everything below nested directories.
        :return: A lazy iterator of DirectoryAttributes and FileAttributes.
        """
        pass

    @abstractmethod
    def move(self, source: str, destination: str, options: Options = None) -> None:
        pass

    @abstractmethod
    def copy(self, source: str, destination: str, options: Options = None) -> None:
        pass

    @abstractmethod
    def checksum(
        self, path: str, options: Union[ChecksumOptions, dict, None] = None
    ) -> str:
        """
        Returns a checksum of the file contents.

        :param path: Logical path of the file.
        :param options: Selects the algorithm ("etag" by default).
        """
        pass

    @abstractmethod
    def public_url(self, path: str, options: Optional[dict] = None) -> str:
        pass

    @abstractmethod
    def get_metadata(self, path: str) -> FileAttributes:
        pass
