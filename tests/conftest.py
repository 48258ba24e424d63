from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from preview_edge.main import app


@pytest.fixture
def client():
    """TestClient with lifespan startup/shutdown hooks fully mocked.

    The collection is an ``AsyncMock`` so background log writes complete
    without a database.
    """
    with (
        patch(
            "preview_edge.core.database.DatabaseManager.connect",
            new_callable=AsyncMock,
        ),
        patch(
            "preview_edge.core.database.DatabaseManager.disconnect",
            new_callable=AsyncMock,
        ),
        patch(
            "preview_edge.core.database.DatabaseManager.get_collection",
            return_value=AsyncMock(),
        ),
        patch(
            "preview_edge.main.close_http_client",
            new_callable=AsyncMock,
        ),
    ):
        with TestClient(app, follow_redirects=False) as c:
            yield c
