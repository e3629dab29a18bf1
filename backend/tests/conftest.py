"""
Cyber Kitchen Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── media: MediaManager rooted in a temporary directory
    ├── memory_repository: InMemoryRecipeRepository
    ├── web: FakeWeb serving canned pages/images through httpx.MockTransport
    ├── importer: RecipeImporter wired to `web` and `media`
    └── test_client: HTTPX AsyncClient talking to a fresh app instance
"""

import json
import os
import tempfile
from typing import Any, Dict, List, Optional, Tuple, Union

# Settings are read at import time; point them at a scratch directory first
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="cyberkitchen_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cyberkitchen.dependencies import (
    get_media_manager,
    get_recipe_importer,
    get_recipe_repository,
    get_upload_service,
)
from cyberkitchen.services.import_service import RecipeImporter
from cyberkitchen.services.media_service import MediaManager
from cyberkitchen.services.repository_base import InMemoryRecipeRepository
from cyberkitchen.services.upload_service import UploadService


# ══════════════════════════════════════════════════════════════════════════
# Fake Web
# ══════════════════════════════════════════════════════════════════════════

class FakeWeb:
    """
    Canned HTTP responses keyed by absolute URL.

    Unknown URLs behave like an unreachable host (httpx.ConnectError).
    Every request is recorded in `requests` for header assertions.
    """

    def __init__(self):
        self.routes: Dict[str, Tuple[int, bytes, str]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        url: str,
        content: Union[str, bytes],
        status: int = 200,
        content_type: str = "text/html; charset=utf-8",
    ) -> None:
        body = content.encode("utf-8") if isinstance(content, str) else content
        self.routes[url] = (status, body, content_type)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            raise httpx.ConnectError("Host unreachable", request=request)
        status, body, content_type = route
        return httpx.Response(status, content=body, headers={"content-type": content_type})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def recipe_page(*blocks: Any, title: str = "Recipe") -> str:
    """
    Build an HTML page with one <script type="application/ld+json"> per block.

    Dicts/lists are JSON-encoded; strings are embedded verbatim (for broken JSON).
    """
    scripts = "\n".join(
        '<script type="application/ld+json">{}</script>'.format(
            block if isinstance(block, str) else json.dumps(block)
        )
        for block in blocks
    )
    return f"<html><head><title>{title}</title>{scripts}</head><body><h1>{title}</h1></body></html>"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def media(tmp_path) -> MediaManager:
    """MediaManager rooted at <tmp>/recipes/medias (created on init)."""
    return MediaManager(media_root=tmp_path / "recipes" / "medias")


@pytest.fixture
def memory_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def importer(media, web) -> RecipeImporter:
    return RecipeImporter(media=media, timeout=5.0, transport=web.transport)


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_recipes() -> List[Dict[str, Any]]:
    return [
        {
            "title": "Pasta al Pomodoro",
            "description": "Weeknight classic",
            "ingredients": ["Tomato", "Pasta", "Basil"],
            "instructions": "Boil water\n\nAdd pasta",
            "imageUrl": "/recipes/medias/Italian/img-1-2.jpg",
            "servings": 2,
            "prepTime": "PT10M",
            "cookTime": "PT15M",
            "sourceUrl": "",
        },
        {
            "title": "Crème brûlée",
            "ingredients": [],
            "servings": 4,
            "category": "Desserts",
            "id": 1700000000000,
        },
    ]


@pytest_asyncio.fixture
async def test_client(media, memory_repository, importer):
    """
    HTTPX AsyncClient bound to a fresh app whose services use temp storage.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from cyberkitchen.main import create_app

    app = create_app()
    app.dependency_overrides[get_recipe_repository] = lambda: memory_repository
    app.dependency_overrides[get_media_manager] = lambda: media
    app.dependency_overrides[get_upload_service] = lambda: UploadService(media=media)
    app.dependency_overrides[get_recipe_importer] = lambda: importer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
