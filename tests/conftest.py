"""
Pytest fixtures for Celestia test suite.
"""

import pytest

from app import create_app
from physics.body import Body
from settings import Settings
from storage import PersistenceTarget


@pytest.fixture
def settings(tmp_path):
    """Settings with a throwaway cache directory and inline integration."""
    return Settings(
        cache_dir=str(tmp_path / "cache"),
        persistence=PersistenceTarget.CACHE,
        workers=1,
    )


@pytest.fixture
def app(settings):
    """Create application for testing."""
    app = create_app(settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def earth_moon():
    """Earth/Moon-scale pair at rest on the x axis."""
    return [
        Body("Earth", 5.97e24, 6.371e6, [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]),
        Body("Moon", 7.35e22, 1.7374e6, [3.84e8, 0.0, 0.0], [0.0, 0.0, 0.0]),
    ]
