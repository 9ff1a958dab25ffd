# marketplace/records.py
"""
Persistence boundary.

Every collection is read through load_records(), which validates each stored
document into its pydantic model. Invalid documents are skipped (and logged),
and any storage failure degrades to an empty list so dashboards show empty
states instead of errors.

Writes are keyed by the record's own "id" field, never by Mongo's _id.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from flask import current_app, has_app_context
from pydantic import BaseModel, ValidationError
from pymongo.errors import PyMongoError

from marketplace.mongo_safe import get_col

M = TypeVar("M", bound=BaseModel)

# Collection names
PRODUCTS = "products"
OWNER_PRODUCTS = "owner_products"
ORDERS = "orders"
FARMS = "farms"
PROMO_CODES = "promo_codes"
CARTS = "carts"
BLOG_POSTS = "blog_posts"
BLOG_COMMENTS = "blog_comments"
POST_VIEWS = "post_views"
MESSAGES = "messages"


class StorageUnavailable(Exception):
    pass


def _warn(msg: str, *args):
    if has_app_context():
        current_app.logger.warning(msg, *args)
    else:
        print("⚠️ " + (msg % args if args else msg))


def _col(name: str):
    col = get_col(name)
    if col is None:
        raise StorageUnavailable(name)
    return col


def _parse(model: Type[M], doc: Dict[str, Any], collection: str) -> Optional[M]:
    try:
        return model.model_validate(doc)
    except ValidationError as e:
        _warn("skipping invalid %s record %s: %s", collection, doc.get("id"), e.error_count())
        return None


def load_records(collection: str, model: Type[M], query: Optional[Dict[str, Any]] = None,
                 sort: Optional[List] = None) -> List[M]:
    try:
        cur = _col(collection).find(query or {}, {"_id": 0})
        if sort:
            cur = cur.sort(sort)
        docs = list(cur)
    except StorageUnavailable:
        return []
    except PyMongoError as e:
        _warn("read of %s failed: %s", collection, e)
        return []

    out = []
    for d in docs:
        rec = _parse(model, d, collection)
        if rec is not None:
            out.append(rec)
    return out


def find_record(collection: str, model: Type[M], query: Dict[str, Any]) -> Optional[M]:
    try:
        doc = _col(collection).find_one(query, {"_id": 0})
    except StorageUnavailable:
        return None
    except PyMongoError as e:
        _warn("read of %s failed: %s", collection, e)
        return None
    if not doc:
        return None
    return _parse(model, doc, collection)


def save_record(collection: str, record: BaseModel) -> None:
    """Upsert by id. Raises StorageUnavailable when the store is down."""
    doc = record.model_dump(mode="json")
    try:
        _col(collection).replace_one({"id": doc["id"]}, doc, upsert=True)
    except StorageUnavailable:
        raise
    except PyMongoError as e:
        _warn("write to %s failed: %s", collection, e)
        raise StorageUnavailable(collection) from e


def delete_records(collection: str, ids: Iterable[str]) -> int:
    ids = list(ids)
    if not ids:
        return 0
    try:
        res = _col(collection).delete_many({"id": {"$in": ids}})
    except StorageUnavailable:
        raise
    except PyMongoError as e:
        _warn("delete from %s failed: %s", collection, e)
        raise StorageUnavailable(collection) from e
    return res.deleted_count


def delete_record(collection: str, record_id: str) -> bool:
    return delete_records(collection, [record_id]) > 0


def update_fields(collection: str, query: Dict[str, Any], update: Dict[str, Any]) -> int:
    """Raw update for counters and other in-place changes; returns modified count."""
    try:
        res = _col(collection).update_one(query, update)
    except StorageUnavailable:
        raise
    except PyMongoError as e:
        _warn("update of %s failed: %s", collection, e)
        raise StorageUnavailable(collection) from e
    return res.modified_count


# -----------------------------
# Service result helpers
# -----------------------------
def ok(**data) -> Dict[str, Any]:
    return {"ok": True, **data}


def fail(error: str, message: str) -> Dict[str, Any]:
    return {"ok": False, "error": error, "message": message}


def not_found(message: str) -> Dict[str, Any]:
    return fail("not_found", message)


def invalid(message: str) -> Dict[str, Any]:
    return fail("validation", message)


def unavailable() -> Dict[str, Any]:
    return fail("storage", "Storage is unavailable, please try again later")


def first_error(e: ValidationError, with_field: bool = True) -> str:
    """Human message from a pydantic ValidationError."""
    err = e.errors()[0]
    loc = ".".join(str(x) for x in err.get("loc", ()))
    msg = err.get("msg", "invalid value")
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{loc}: {msg}" if loc and with_field else msg
