# log.py
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .exceptions import NoLoggerConfigured


class AdapterLogger:
    """
    Logging facade injected into the adapter.

    Calls are no-ops while logging is disabled or no logger is attached.
    Each record gets the owner's base context plus the call-site context under
    the "context" attribute, so handlers can render it however they like.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        enabled: bool = False,
        context_provider: Optional[Callable[[], dict]] = None,
    ):
        self.logger = logger
        self.context_provider = context_provider
        self._enabled = False
        self.set_logging(enabled)

    def set_logger(self, logger: Optional[logging.Logger]) -> "AdapterLogger":
        self.logger = logger
        if logger is None:
            self._enabled = False
        return self

    def set_logging(self, enabled: bool) -> "AdapterLogger":
        if enabled and self.logger is None:
            raise NoLoggerConfigured("No logger provided. Cannot enable logging.")
        self._enabled = bool(enabled)
        return self

    def enable(self) -> "AdapterLogger":
        return self.set_logging(True)

    def disable(self) -> "AdapterLogger":
        return self.set_logging(False)

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def debug(self, message: str, **context) -> None:
        self.log(logging.DEBUG, message, context)

    def info(self, message: str, **context) -> None:
        self.log(logging.INFO, message, context)

    def warning(self, message: str, **context) -> None:
        self.log(logging.WARNING, message, context)

    def error(self, message: str, **context) -> None:
        self.log(logging.ERROR, message, context)

    def critical(self, message: str, **context) -> None:
        self.log(logging.CRITICAL, message, context)

    def log(self, level: int, message: str, context: Optional[dict] = None) -> None:
        if not self._enabled or self.logger is None:
            return

        base = self.context_provider() if self.context_provider else {}
        record_context = {
            **base,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(context or {}),
        }
        exc = record_context.get("exception")
        self.logger.log(
            level,
            message,
            exc_info=exc if isinstance(exc, BaseException) and level >= logging.ERROR else None,
            extra={"context": record_context},
        )


def setup_logging(level: str = "INFO") -> None:
    """Configures console logging for the root logger."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Clear any existing handlers to prevent duplicate logs on re-runs or implicit configs
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    # Reducing "noise" from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("cloudinary").setLevel(logging.WARNING)
