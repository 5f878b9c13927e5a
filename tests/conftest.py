"""
stagewrap — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    sample_environ:   A small WSGI-style environment mapping
    ok_response:      A fixed valid Response
    fixed_app:        Application returning ok_response, wrapped in a Mock for call counting
    echo_app:         Application whose response body echoes PATH_INFO
    phase_log:        List that recording middleware append phase names to
    restore_settings: Restores mutated settings fields after a test
"""

import os
from unittest.mock import Mock

import pytest

# Keep library logging quiet unless a test opts in via caplog
os.environ["STAGEWRAP_LOG_LEVEL"] = "WARNING"

from stagewrap.config import settings
from stagewrap.schemas.response import Response


@pytest.fixture
def sample_environ():
    return {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": "/api/items",
        "QUERY_STRING": "page=1",
        "SERVER_NAME": "localhost",
    }


@pytest.fixture
def ok_response():
    return Response(
        status=200,
        headers=[("Content-Type", "text/plain")],
        body=[b"ok"],
    )


@pytest.fixture
def fixed_app(ok_response):
    """
    Application that always returns ``ok_response``.

    Usage:
        fixed_app.call_count  → number of times the application ran
    """
    def app(environ):
        return ok_response

    return Mock(side_effect=app)


@pytest.fixture
def echo_app():
    def app(environ):
        return Response(
            status=200,
            headers=[("X-Path", environ["PATH_INFO"])],
            body=[environ["PATH_INFO"].encode()],
        )

    return app


@pytest.fixture
def phase_log():
    return []


@pytest.fixture
def restore_settings():
    """Snapshots the settings singleton and restores it after the test."""
    saved = settings.model_dump()
    yield settings
    for key, value in saved.items():
        setattr(settings, key, value)
