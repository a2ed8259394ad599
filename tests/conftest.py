"""Shared fixtures and helpers for reconciler tests."""

import base64
from typing import Any, Optional

import httpx
import pytest

from reconcile.config import Settings
from reconcile.models import Alert, Entry


def make_entry(line: int = 2, **data: Optional[str]) -> Entry:
    """Create a test entry from keyword columns."""
    return Entry(line=line, data=data)


def make_officer(
    title: str = "John Smith",
    officer_id: str = "abc123",
    date_of_birth: Optional[dict[str, int]] = None,
    address: Optional[str] = "1 Road",
) -> dict[str, Any]:
    """Create a Companies House officer search item."""
    item: dict[str, Any] = {
        "title": title,
        "links": {"self": f"/officers/{officer_id}/appointments"},
        "address_snippet": address,
    }
    if date_of_birth is not None:
        item["date_of_birth"] = date_of_birth
    return item


def basic_username(request: httpx.Request) -> str:
    """Return the username a request was sent with."""
    encoded = request.headers["authorization"].split(" ", 1)[1]
    return base64.b64decode(encoded).decode().split(":", 1)[0]


def mock_client(handler) -> httpx.AsyncClient:
    """Create an AsyncClient answering every request with ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local environment."""
    return Settings(
        companies_house_api_key="",
        opencorporates_api_token="",
        request_fanout_factor=2,
        entry_concurrency=5,
    )


@pytest.fixture
def alerts() -> list[Alert]:
    """Collects alerts raised during a test."""
    return []
