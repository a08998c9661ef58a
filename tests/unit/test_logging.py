from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest
import structlog

from with_transaction.logging import configure_logging

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def test_configure_logging_renders_json(caplog: pytest.LogCaptureFixture) -> None:
    configure_logging("INFO", json_logs=True)

    with caplog.at_level(logging.INFO):
        structlog.get_logger("with_transaction.tests").info("transaction.retry", attempt=1)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "transaction.retry"
    assert payload["attempt"] == 1
    assert payload["level"] == "info"
    assert "timestamp" in payload


def test_configure_logging_filters_below_level(caplog: pytest.LogCaptureFixture) -> None:
    configure_logging("INFO", json_logs=False)

    with caplog.at_level(logging.INFO):
        structlog.get_logger("with_transaction.tests").debug("transaction.begin", level=1)

    assert caplog.records == []
