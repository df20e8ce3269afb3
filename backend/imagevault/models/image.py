"""
ImageVault Backend — Image Document Shape
===========================================

What:  The stored shape of an image record in the `images` collection.
Why:   MongoDB is schema-less; this module is the one place the field names
       of a stored record are spelled out.
Who:   ImageService builds documents and update sets from here.

Document (camelCase keys, as existing clients read them):
    {
        "_id":         ObjectId,         # generated by the store on insert
        "name":        str | None,
        "type":        str | None,
        "description": str | None,
        "color":       str,              # "" when not supplied
        "lifeSpan":    str,              # "" when not supplied
        "imagePath":   "/uploads/<millis>-<original filename>",
        "createdAt":   datetime (UTC),
        "lifespan":    str | None,       # written only by updates
    }

Note the two spellings: creation writes `lifeSpan`, updates write
`lifespan`. Both are kept so records written by older clients stay readable.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Text fields an update is allowed to touch. _id, imagePath and createdAt
# are never part of an update set.
UPDATABLE_FIELDS = ("name", "type", "description", "color", "lifespan")


def new_image_document(
    image_path: str,
    name: Optional[str] = None,
    type: Optional[str] = None,
    description: Optional[str] = None,
    color: Optional[str] = None,
    life_span: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the document inserted for one successful upload."""
    return {
        "name": name,
        "type": type,
        "description": description,
        "color": color or "",
        "lifeSpan": life_span or "",
        "imagePath": image_path,
        "createdAt": created_at or datetime.now(timezone.utc),
    }
