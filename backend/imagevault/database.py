"""
ImageVault Backend — Document Store Connection
================================================

What:  Async MongoDB client construction and FastAPI dependencies.
Why:   Keeps the store handle out of module globals. The client is built
       during the application lifespan, kept on `app.state`, and injected
       into route handlers per request.
How:   PyMongo's native asyncio client (`AsyncMongoClient`). Client creation
       does not connect; the first operation does.
Who:   main.lifespan creates and closes the client; routes depend on
       get_images_collection / get_mongo_client.

Lifecycle:
    Startup:   create_client() → app.state.mongo_client
               client[db][collection] → app.state.images_collection
    Request:   Depends(get_images_collection) → ImageService(collection)
    Shutdown:  close_client()
"""

import logging
from typing import Optional

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection

from imagevault.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def create_client(config: Optional[Settings] = None) -> AsyncMongoClient:
    """
    Build the MongoDB client from settings.

    tz_aware=True: createdAt comes back as an aware UTC datetime, so the API
    serializes it with an explicit offset.
    """
    config = config or default_settings
    client = AsyncMongoClient(
        config.mongo_url,
        tz_aware=True,
        serverSelectionTimeoutMS=config.mongo_server_selection_timeout_ms,
    )
    logger.info(
        "MongoDB client created for %s (db=%s)", config.mongo_url, config.mongo_db_name
    )
    return client


def get_collection(
    client: AsyncMongoClient, config: Optional[Settings] = None
) -> AsyncCollection:
    """Select the images collection. MongoDB creates it on first insert."""
    config = config or default_settings
    return client[config.mongo_db_name][config.mongo_collection]


async def close_client(client: AsyncMongoClient) -> None:
    """Close all pooled connections. Called from the lifespan on shutdown."""
    await client.close()
    logger.info("MongoDB client closed")


# ── Request Dependencies ──────────────────────────────────────────────────
def get_mongo_client(request: Request) -> AsyncMongoClient:
    """FastAPI dependency returning the client created at startup."""
    return request.app.state.mongo_client


def get_images_collection(request: Request) -> AsyncCollection:
    """
    FastAPI dependency returning the images collection.

    Tests replace this through app.dependency_overrides with a mock
    collection, so no live MongoDB is needed.
    """
    return request.app.state.images_collection
