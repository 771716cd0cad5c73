# exceptions.py
from typing import Optional


class CloudinaryStorageError(Exception):
    """Base exception for everything raised by the adapter."""
    pass


class NoLoggerConfigured(CloudinaryStorageError):
    """Logging was enabled but no logger has been attached."""
    pass


class ValidationFailed(CloudinaryStorageError):
    """Invalid caller input, detected before any remote call is made."""
    pass


class InvalidVisibility(ValidationFailed):
    def __init__(self, visibility: str, expected: str):
        self.visibility = visibility
        super().__init__(f"Invalid visibility [{visibility}]. Expected {expected}.")


class InvalidChecksumAlgorithm(ValidationFailed):
    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Checksum algorithm [{algorithm}] is not supported.")


ChecksumAlgoNotSupported = InvalidChecksumAlgorithm


class InvalidConfigurationValue(ValidationFailed):
    pass


class OperationFailed(CloudinaryStorageError):
    """
    A public adapter operation could not be completed.
    The underlying remote error, if any, is chained as __cause__.
    """

    action = "complete operation"

    def __init__(self, location: str, reason: str = ""):
        self.location = location
        self.reason = reason
        message = f"Unable to {self.action} at location: {location}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class CheckExistenceFailed(OperationFailed):
    action = "check existence"


class WriteFailed(OperationFailed):
    action = "write file"


class ReadFailed(OperationFailed):
    action = "read file"


class DeleteFailed(OperationFailed):
    action = "delete file"


class DeleteDirectoryFailed(OperationFailed):
    action = "delete directory"


class CreateDirectoryFailed(OperationFailed):
    action = "create directory"


class ListFailed(OperationFailed):
    action = "list contents"


class ChecksumFailed(OperationFailed):
    action = "provide checksum"


class UrlGenerationFailed(OperationFailed):
    action = "generate public url"


class VisibilityUnsupported(OperationFailed):
    action = "set visibility"


class MetadataUnavailable(OperationFailed):
    action = "retrieve metadata"

    def __init__(self, location: str, attribute: str, reason: str = ""):
        self.attribute = attribute
        super().__init__(location, f"Attribute [{attribute}]. {reason}".strip())


class _TransferFailed(OperationFailed):
    def __init__(self, source: str, destination: str, reason: str = ""):
        self.source = source
        self.destination = destination
        super().__init__(source, f"Destination [{destination}]. {reason}".strip())


class MoveFailed(_TransferFailed):
    action = "move file"


class CopyFailed(_TransferFailed):
    action = "copy file"


def describe(exc: Optional[BaseException]) -> str:
    """Short text for an exception, used in log lines and failure reasons."""
    if exc is None:
        return ""
    return str(exc) or type(exc).__name__
