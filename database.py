"""
MongoDB access for the plant catalog.

``db`` is the module-level database handle (``None`` when DATABASE_URL or
DATABASE_NAME is not configured). Helpers stamp ``createdAt``/``updatedAt``
and translate string ids to ObjectIds.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient, ReturnDocument

from config import config

logger = logging.getLogger('database')


class DatabaseUnavailable(RuntimeError):
    pass


def _connect():
    if not (config.DATABASE_URL and config.DATABASE_NAME):
        return None
    client = MongoClient(config.DATABASE_URL)
    logger.info(f"MongoDB client created for database '{config.DATABASE_NAME}'")
    return client[config.DATABASE_NAME]


db = _connect()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_collection(collection_name: str):
    if db is None:
        raise DatabaseUnavailable(
            "Database not available. Check DATABASE_URL and DATABASE_NAME environment variables."
        )
    return db[collection_name]


def to_object_id(doc_id: str) -> Optional[ObjectId]:
    """Parse ``doc_id``; malformed ids come back as ``None``."""
    try:
        return ObjectId(doc_id)
    except (InvalidId, TypeError):
        return None


def _as_dict(data: Any) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True)
    return dict(data)


def create_document(collection_name: str, data: Any) -> str:
    doc = _as_dict(data)
    now = _now()
    doc["createdAt"] = now
    doc["updatedAt"] = now
    result = get_collection(collection_name).insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = get_collection(collection_name).find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document(collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return get_collection(collection_name).find_one({"_id": oid})


def update_document(collection_name: str, doc_id: str, changes: Any) -> Optional[Dict[str, Any]]:
    """Apply ``changes`` with ``$set`` and return the updated document."""
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    fields = _as_dict(changes)
    fields["updatedAt"] = _now()
    return get_collection(collection_name).find_one_and_update(
        {"_id": oid},
        {"$set": fields},
        return_document=ReturnDocument.AFTER,
    )


def delete_document(collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return get_collection(collection_name).find_one_and_delete({"_id": oid})
