"""
Shared fixtures: a live listener on an ephemeral port and an HTTP client for it.
"""

from __future__ import annotations

from collections.abc import Generator

import httpx
import pytest

from webapp.server import Listener, running_server


@pytest.fixture
def live_server() -> Generator[Listener, None, None]:
    """Serve the app on 127.0.0.1:<ephemeral> for one test, then release it."""
    with running_server() as listener:
        yield listener


@pytest.fixture
def client(live_server: Listener) -> Generator[httpx.Client, None, None]:
    with httpx.Client(base_url=live_server.url, timeout=5.0) as c:
        yield c
