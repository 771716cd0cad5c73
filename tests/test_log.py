# tests/test_log.py
import logging
from unittest.mock import MagicMock

import pytest

from cloudinary_storage.exceptions import NoLoggerConfigured
from cloudinary_storage.log import AdapterLogger, setup_logging


def test_disabled_logger_is_a_no_op():
    logger = MagicMock(spec=logging.Logger)
    facade = AdapterLogger(logger, enabled=False)

    facade.critical("boom")

    logger.log.assert_not_called()


def test_enabling_without_logger_raises():
    with pytest.raises(NoLoggerConfigured):
        AdapterLogger(None, enabled=True)

    facade = AdapterLogger()
    with pytest.raises(NoLoggerConfigured):
        facade.enable()


def test_context_is_attached_to_record():
    logger = MagicMock(spec=logging.Logger)
    facade = AdapterLogger(logger, enabled=True, context_provider=lambda: {"class": "Adapter"})

    facade.warning("careful", path="a.txt")

    level, message = logger.log.call_args.args
    context = logger.log.call_args.kwargs["extra"]["context"]
    assert level == logging.WARNING
    assert message == "careful"
    assert context["class"] == "Adapter"
    assert context["path"] == "a.txt"
    assert "timestamp" in context
    assert logger.log.call_args.kwargs["exc_info"] is None


def test_exception_info_only_for_errors():
    logger = MagicMock(spec=logging.Logger)
    facade = AdapterLogger(logger, enabled=True)
    error = RuntimeError("remote down")

    facade.debug("not found", exception=error)
    assert logger.log.call_args.kwargs["exc_info"] is None

    facade.critical("failed", exception=error)
    assert logger.log.call_args.kwargs["exc_info"] is error


def test_set_logger_none_disables_logging():
    facade = AdapterLogger(MagicMock(spec=logging.Logger), enabled=True)
    facade.set_logger(None)
    assert facade.is_enabled is False


def test_records_reach_real_handlers(caplog):
    logger = logging.getLogger("cloudinary_storage.test_log")
    facade = AdapterLogger(logger, enabled=True)

    with caplog.at_level(logging.DEBUG, logger="cloudinary_storage.test_log"):
        facade.info("hello", method="write")

    assert caplog.records[0].message == "hello"
    assert caplog.records[0].context["method"] == "write"


def test_setup_logging_configures_root_logger():
    root_logger = logging.getLogger()
    saved_handlers, saved_level = list(root_logger.handlers), root_logger.level
    try:
        setup_logging("debug")
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert logging.getLogger("cloudinary").level == logging.WARNING
    finally:
        root_logger.handlers = saved_handlers
        root_logger.setLevel(saved_level)
