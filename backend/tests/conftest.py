"""
Test configuration and fixtures for the palette service tests.
"""
import numpy as np
import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def rng():
    """Seeded random source for reproducible jitter and sampling."""
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from s1palette.utils.metrics import reset_metrics
    reset_metrics()
