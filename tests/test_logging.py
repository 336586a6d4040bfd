"""Tests for sugarflow.logging (root setup and HTTP client loggers)."""

import logging

import pytest

from sugarflow.config import LoggingConfig
from sugarflow.logging import DEFAULT_FORMAT, SugarflowLogging


@pytest.fixture(autouse=True)
def restore_http_loggers():
    yield
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.NOTSET)


def test_http_loggers_quiet_at_debug() -> None:
    """Root DEBUG does not turn on per-request urllib3/requests output."""
    SugarflowLogging(LoggingConfig(level="DEBUG")).setup()
    assert logging.root.level == logging.DEBUG
    assert logging.getLogger("urllib3").getEffectiveLevel() == logging.WARNING
    assert not logging.getLogger("urllib3.connectionpool").isEnabledFor(logging.DEBUG)
    assert logging.getLogger("sugarflow.adapters").isEnabledFor(logging.DEBUG)


def test_http_loggers_follow_stricter_root_level() -> None:
    SugarflowLogging(LoggingConfig(level="ERROR")).setup()
    assert logging.getLogger("requests").level == logging.ERROR


def test_debug_http_lets_client_loggers_follow_root() -> None:
    SugarflowLogging(LoggingConfig(level="DEBUG")).setup()
    SugarflowLogging(LoggingConfig(level="DEBUG", debug_http=True)).setup()
    assert logging.getLogger("urllib3").level == logging.NOTSET
    assert logging.getLogger("urllib3.connectionpool").isEnabledFor(logging.DEBUG)


def test_custom_quiet_loggers() -> None:
    SugarflowLogging(LoggingConfig(level="INFO", quiet_loggers=["sugarflow.test.noisy"])).setup()
    assert logging.getLogger("sugarflow.test.noisy").level == logging.WARNING
    logging.getLogger("sugarflow.test.noisy").setLevel(logging.NOTSET)


def test_unknown_level_falls_back_to_info() -> None:
    logs = SugarflowLogging(LoggingConfig(level="TRACE", format=""))
    assert logs.level == logging.INFO
    assert logs.format == DEFAULT_FORMAT
    logs.setup()
    assert logging.root.level == logging.INFO
    assert logging.root.handlers[0].formatter._fmt == DEFAULT_FORMAT


def test_level_name_is_normalized() -> None:
    assert SugarflowLogging(LoggingConfig(level=" warning ")).level == logging.WARNING
