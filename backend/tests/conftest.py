"""
ImageVault Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests run without a MongoDB server and without touching ./uploads.
How:   Environment is overridden before the application is imported; the
       store collection and the upload directory are swapped in through
       FastAPI's dependency_overrides.

Fixtures:
    ├── mock_collection:    AsyncMock collection for service unit tests
    ├── fake_collection:    In-memory collection for end-to-end API tests
    ├── upload_dir:         Temporary upload directory
    ├── sample_image_bytes: Fake image content for upload tests
    └── test_client:        HTTPX AsyncClient wired to the app
"""

import os
import tempfile
from copy import deepcopy
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any app imports
os.environ["MONGO_URL"] = "mongodb://127.0.0.1:1"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="imagevault_test_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from imagevault.database import get_images_collection, get_mongo_client
from imagevault.services.upload_service import UploadService, get_upload_service


# ══════════════════════════════════════════════════════════════════════════
# In-memory collection
# ══════════════════════════════════════════════════════════════════════════

class FakeCursor:
    """The part of AsyncCursor the service uses."""

    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        docs = [deepcopy(d) for d in self._documents]
        return docs if length is None else docs[:length]


class FakeCollection:
    """
    Dictionary-backed stand-in for an AsyncCollection.

    Supports exactly the calls ImageService makes: insert_one, find,
    find_one, update_one ($set only) and count_documents, filtering on _id.
    """

    def __init__(self):
        self.documents = {}

    async def insert_one(self, document):
        oid = ObjectId()
        stored = dict(document, _id=oid)
        self.documents[oid] = stored
        return SimpleNamespace(inserted_id=oid, acknowledged=True)

    def find(self, filter=None):
        return FakeCursor(list(self.documents.values()))

    async def find_one(self, filter):
        doc = self.documents.get(filter["_id"])
        return deepcopy(doc) if doc is not None else None

    async def update_one(self, filter, update):
        doc = self.documents.get(filter["_id"])
        if doc is None:
            return SimpleNamespace(
                acknowledged=True, matched_count=0, modified_count=0, upserted_id=None
            )
        changes = update["$set"]
        modified = any(doc.get(k, object()) != v for k, v in changes.items())
        doc.update(changes)
        return SimpleNamespace(
            acknowledged=True,
            matched_count=1,
            modified_count=1 if modified else 0,
            upserted_id=None,
        )

    async def count_documents(self, filter, limit=0):
        return 1 if filter["_id"] in self.documents else 0


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_collection():
    """
    AsyncMock collection for unit-testing ImageService.

    Usage:
        mock_collection.find_one.return_value = {...}
        result = await ImageService(mock_collection).get_image(str(oid))
    """
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.count_documents = AsyncMock()
    collection.find = MagicMock()
    return collection


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def upload_dir(tmp_path):
    """Fresh upload directory path per test; not created until first write."""
    return tmp_path / "uploads"


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI + JFIF header + EOI. Content is never inspected."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_document():
    return {
        "_id": ObjectId(),
        "name": "Cat",
        "type": "Mammal",
        "description": "A small cat",
        "color": "",
        "lifeSpan": "",
        "imagePath": "/uploads/1718000000123-cat.jpg",
        "createdAt": datetime(2024, 6, 10, 6, 13, 20, tzinfo=timezone.utc),
    }


@pytest.fixture
def mock_mongo_client():
    """Client whose ping succeeds; set a side_effect to simulate an outage."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    return client


@pytest_asyncio.fixture
async def test_client(fake_collection, upload_dir, mock_mongo_client):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The lifespan does not run, so no MongoDB client is created; the
    collection and upload service come from dependency overrides.
    """
    from imagevault.main import app

    app.dependency_overrides[get_images_collection] = lambda: fake_collection
    app.dependency_overrides[get_upload_service] = lambda: UploadService(str(upload_dir))
    app.dependency_overrides[get_mongo_client] = lambda: mock_mongo_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
