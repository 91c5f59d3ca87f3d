"""Shared fixtures for Google Calendar unit tests."""

from __future__ import annotations

from unittest.mock import MagicMock, create_autospec

import pytest
from google.oauth2.credentials import Credentials


@pytest.fixture()
def mock_credentials() -> MagicMock:
    """Return a mock Credentials object that reports as valid."""
    creds = create_autospec(Credentials, instance=True)
    creds.valid = True
    creds.expired = False
    creds.refresh_token = "fake-refresh-token"
    creds.to_json.return_value = '{"token": "fake"}'
    return creds


@pytest.fixture()
def mock_expired_credentials() -> MagicMock:
    """Return a mock Credentials object that is expired but has a refresh token."""
    creds = create_autospec(Credentials, instance=True)
    creds.valid = False
    creds.expired = True
    creds.refresh_token = "fake-refresh-token"
    creds.to_json.return_value = '{"token": "refreshed"}'
    return creds


@pytest.fixture()
def mock_service() -> MagicMock:
    """Return a mock Calendar API service whose calls all succeed empty."""
    service = MagicMock()
    events = service.events.return_value
    events.list.return_value.execute.return_value = {"items": []}
    events.delete.return_value.execute.return_value = ""
    return service
