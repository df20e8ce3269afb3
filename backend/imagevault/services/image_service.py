"""
ImageVault Backend — Image Record Service
===========================================

What:  The four record operations: create, list, get-by-id, update.
Why:   Keeps store access and error translation out of the route handlers.
How:   Each operation is a single call on the injected MongoDB collection.
       Driver failures are wrapped in DatabaseError carrying the driver's
       message text; the global handlers turn that into a 500.
Who:   Constructed per request by get_image_service() from the collection
       created at startup.

Consistency:
    The file is written before the record is inserted, and nothing undoes
    the write if the insert fails. A failed insert or a crash in between
    leaves an orphaned file in the upload directory with no record.
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends
from pymongo.asynchronous.collection import AsyncCollection

from imagevault.config import settings
from imagevault.database import get_images_collection
from imagevault.exceptions import DatabaseError, InvalidIdentifierError, NotFoundError
from imagevault.models.image import UPDATABLE_FIELDS, new_image_document
from imagevault.schemas.image import ImageRecord, ImageUpdate, InsertResult, UpdateResult

logger = logging.getLogger(__name__)


def parse_object_id(image_id: str) -> ObjectId:
    """
    Interpret a path id as an ObjectId.

    Raises:
        InvalidIdentifierError (→ 500) with bson's message. A malformed id
        is reported as a server error, not as "not found".
    """
    try:
        return ObjectId(image_id)
    except (InvalidId, TypeError) as e:
        raise InvalidIdentifierError(message=str(e), context={"image_id": image_id})


class ImageService:
    """
    Record operations against one collection.

    Args:
        collection: Async collection holding image documents.
        update_strategy: "merge" writes only the fields sent; "overwrite"
            writes all five, turning omitted ones into null.
    """

    def __init__(self, collection: AsyncCollection, update_strategy: Optional[str] = None):
        self.collection = collection
        self.update_strategy = update_strategy or settings.update_strategy

    async def create_image(
        self,
        image_path: str,
        name: Optional[str] = None,
        type: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
        life_span: Optional[str] = None,
    ) -> InsertResult:
        """
        Insert one record for an already-stored file.

        No field is required: a missing name is stored as null rather than
        rejected.

        Raises:
            DatabaseError: insert failed
        """
        document = new_image_document(
            image_path=image_path,
            name=name,
            type=type,
            description=description,
            color=color,
            life_span=life_span,
        )

        try:
            result = await self.collection.insert_one(document)
        except Exception as e:
            logger.error("Insert failed for %s: %s", image_path, str(e))
            raise DatabaseError(message=str(e), context={"image_path": image_path})

        logger.info("Image record created: %s (%s)", result.inserted_id, image_path)
        return InsertResult(acknowledged=result.acknowledged, insertedId=result.inserted_id)

    async def list_images(self) -> List[ImageRecord]:
        """
        Every record, in the store's natural scan order.

        No sort, pagination or filtering. Order is whatever the store yields
        and is not guaranteed to be insertion order.
        """
        try:
            documents = await self.collection.find().to_list(None)
        except Exception as e:
            logger.error("Database error listing images: %s", str(e), exc_info=True)
            raise DatabaseError(message=str(e), context={"error_type": type(e).__name__})

        return [ImageRecord.model_validate(doc) for doc in documents]

    async def get_image(self, image_id: str) -> ImageRecord:
        """
        Fetch one record by id.

        Raises:
            InvalidIdentifierError: id is not a valid ObjectId (→ 500)
            NotFoundError: no record with that id (→ 404)
            DatabaseError: query failed (→ 500)
        """
        object_id = parse_object_id(image_id)

        try:
            document = await self.collection.find_one({"_id": object_id})
        except Exception as e:
            logger.error("Database error fetching image %s: %s", image_id, str(e))
            raise DatabaseError(message=str(e), context={"image_id": image_id})

        if document is None:
            raise NotFoundError(resource_id=image_id)

        return ImageRecord.model_validate(document)

    def build_update_fields(self, changes: Optional[ImageUpdate]) -> Dict[str, Any]:
        """
        The `$set` document for an update request.

        merge:     only keys the client sent (an explicit null is kept)
        overwrite: all five keys, unsent ones as null
        """
        changes = changes or ImageUpdate()
        if self.update_strategy == "overwrite":
            return {field: getattr(changes, field) for field in UPDATABLE_FIELDS}
        return {
            field: getattr(changes, field)
            for field in UPDATABLE_FIELDS
            if field in changes.model_fields_set
        }

    async def update_image(self, image_id: str, changes: Optional[ImageUpdate]) -> UpdateResult:
        """
        Merge-set the text fields of one record.

        There is no existence check: an unknown id yields matchedCount 0,
        and nothing is upserted. imagePath, createdAt and _id are never
        in the update set.

        Raises:
            InvalidIdentifierError: id is not a valid ObjectId (→ 500)
            DatabaseError: update failed (→ 500)
        """
        object_id = parse_object_id(image_id)
        fields = self.build_update_fields(changes)

        try:
            if not fields:
                # MongoDB rejects an empty $set; report the match without writing.
                matched = await self.collection.count_documents({"_id": object_id}, limit=1)
                return UpdateResult(acknowledged=True, matchedCount=matched, modifiedCount=0)

            result = await self.collection.update_one({"_id": object_id}, {"$set": fields})
        except Exception as e:
            logger.error("Database error updating image %s: %s", image_id, str(e))
            raise DatabaseError(message=str(e), context={"image_id": image_id})

        logger.info(
            "Image %s updated: matched=%d modified=%d fields=%s",
            image_id,
            result.matched_count,
            result.modified_count,
            sorted(fields),
        )
        return UpdateResult(
            acknowledged=result.acknowledged,
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count,
            upsertedId=result.upserted_id,
            upsertedCount=1 if result.upserted_id is not None else 0,
        )


def get_image_service(
    collection: AsyncCollection = Depends(get_images_collection),
) -> ImageService:
    """FastAPI dependency building the service around the injected collection."""
    return ImageService(collection)
