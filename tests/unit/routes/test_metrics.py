"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from facility_booking.errors import ScheduleConflict, StoreError
from facility_booking.main import app
from facility_booking.metrics import (
    booking_operations,
    lock_timeouts,
    points_adjustments,
    sweep_transitions,
    track_operation,
)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    """Test that /metrics endpoint returns Prometheus text format."""
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_custom_metrics(client: TestClient) -> None:
    """Test that /metrics endpoint includes the booking metrics."""
    booking_operations.labels(operation="create", outcome="success").inc()
    lock_timeouts.labels(operation="create").inc()
    sweep_transitions.labels(transition="expired").inc(2)
    points_adjustments.labels(direction="earned").inc()

    content = client.get("/metrics").text

    assert "facility_booking_operations_total" in content
    assert "facility_booking_operation_duration_seconds" in content
    assert "facility_booking_lock_timeouts_total" in content
    assert "facility_booking_sweep_transitions_total" in content
    assert "facility_booking_points_adjustments_total" in content


@pytest.mark.unit
def test_track_operation_labels_business_errors_with_their_code() -> None:
    counter = booking_operations.labels(operation="unit_track", outcome="schedule_conflict")
    before = counter._value.get()

    with pytest.raises(ScheduleConflict):
        with track_operation("unit_track"):
            raise ScheduleConflict("taken")

    assert counter._value.get() == before + 1


@pytest.mark.unit
def test_track_operation_labels_store_errors_with_their_code() -> None:
    counter = booking_operations.labels(operation="unit_track", outcome="store_error")
    before = counter._value.get()

    with pytest.raises(StoreError):
        with track_operation("unit_track"):
            raise StoreError("Database operation failed")

    assert counter._value.get() == before + 1


@pytest.mark.unit
def test_track_operation_labels_unexpected_errors_as_error() -> None:
    counter = booking_operations.labels(operation="unit_track", outcome="error")
    before = counter._value.get()

    with pytest.raises(RuntimeError):
        with track_operation("unit_track"):
            raise RuntimeError("boom")

    assert counter._value.get() == before + 1


@pytest.mark.unit
def test_metrics_endpoint_includes_help_and_type_metadata(client: TestClient) -> None:
    """Test that metrics include Prometheus HELP and TYPE metadata."""
    content = client.get("/metrics").text

    assert "# HELP" in content
    assert "# TYPE" in content
    assert "counter" in content or "histogram" in content or "gauge" in content
