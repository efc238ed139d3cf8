"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from facility_booking.dependencies import get_clock, get_db_engine
from facility_booking.utils.datetime import Clock, utc_now


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine_gen = get_db_engine()
    engine = next(engine_gen)

    assert engine is not None
    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_dependency_injection_can_be_overridden() -> None:
    """Test that the engine dependency can be overridden for testing."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, str]:
        return {"engine_name": engine.name}

    mock_engine = Mock(spec=Engine)
    mock_engine.name = "mock_engine"

    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    client = TestClient(app)
    response = client.get("/test")

    assert response.status_code == 200
    assert response.json() == {"engine_name": "mock_engine"}


@pytest.mark.unit
def test_dependency_injection_provides_same_engine() -> None:
    """Test that multiple calls get the same engine instance."""
    engine1 = next(get_db_engine())
    engine2 = next(get_db_engine())

    assert engine1 is engine2


@pytest.mark.unit
def test_get_clock_defaults_to_utc_now() -> None:
    assert get_clock() is utc_now
    assert get_clock()().tzinfo is not None


@pytest.mark.unit
def test_clock_can_be_frozen_via_override() -> None:
    """Test that routes see a frozen clock when the dependency is overridden."""
    app = FastAPI()
    frozen = datetime(2025, 1, 1, tzinfo=timezone.utc)

    @app.get("/now")
    def now_endpoint(clock: Clock = Depends(get_clock)) -> dict[str, str]:
        return {"now": clock().isoformat()}

    app.dependency_overrides[get_clock] = lambda: (lambda: frozen)

    response = TestClient(app).get("/now")

    assert response.json() == {"now": "2025-01-01T00:00:00+00:00"}
