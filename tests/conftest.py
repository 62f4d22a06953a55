"""Shared test fixtures for SafeQR tests."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from safeqr import main


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """API client with empty history and throttle state."""
    main.HISTORY.clear()
    main.THROTTLE.reset()
    with TestClient(main.app) as c:
        yield c
    main.HISTORY.clear()
    main.THROTTLE.reset()
