"""
Unit tests for structured logging setup.
"""

from __future__ import annotations

import pytest
import structlog

from facility_booking.logging_config import SERVICE_NAME, add_service_name, setup_logging


@pytest.mark.unit
def test_service_name_is_added_without_overwriting() -> None:
    assert add_service_name(None, "info", {"event": "x"})["service"] == SERVICE_NAME
    assert add_service_name(None, "info", {"service": "other"})["service"] == "other"


@pytest.mark.unit
def test_setup_logging_configures_structlog() -> None:
    setup_logging()

    processors = structlog.get_config()["processors"]
    assert structlog.contextvars.merge_contextvars in processors
    assert add_service_name in processors
