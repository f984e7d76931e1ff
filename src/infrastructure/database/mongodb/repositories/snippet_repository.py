from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from observability import emit_event
from src.domain.entities.snippet import Snippet
from src.domain.entities.snippet_query import SnippetFilter, SortSpec
from src.domain.interfaces.snippet_repository_interface import ISnippetRepository


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse an id; malformed ids map to None so they read as "not found"."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


@contextmanager
def reported_db_errors(operation: str) -> Iterator[None]:
    """Report driver errors as structured events and re-raise them unchanged."""
    try:
        yield
    except PyMongoError as e:
        emit_event(f"db_{operation}_error", severity="error", operation=operation, error=str(e))
        raise


def build_snippet_query(snippet_filter: SnippetFilter) -> Dict[str, Any]:
    """Translate the domain predicate into a MongoDB filter document."""
    query: Dict[str, Any] = {"user_id": snippet_filter.user_id}
    clauses: List[Dict[str, Any]] = []

    if snippet_filter.search:
        # Plain substring test: user text must not act as a regex
        pattern = {"$regex": re.escape(snippet_filter.search), "$options": "i"}
        clauses.append({"$or": [
            {"title": pattern},
            {"code": pattern},
            {"description": pattern},
        ]})
    if snippet_filter.language is not None:
        query["language"] = snippet_filter.language
    if snippet_filter.tags:
        wanted = sorted(snippet_filter.tags)
        clauses.append({"$or": [
            {"tags": {"$in": wanted}},
            {"auto_tags": {"$in": wanted}},
        ]})
    if snippet_filter.folder_id is not None:
        query["folder_id"] = snippet_filter.folder_id

    if clauses:
        query["$and"] = clauses
    return query


def build_sort(sort: SortSpec) -> List[tuple]:
    # _id as tie-breaker keeps page boundaries stable for equal sort keys
    return [(sort.field, sort.direction), ("_id", sort.direction)]


def build_page_pipeline(snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int) -> List[Dict[str, Any]]:
    """Single aggregation returning one window and the total over the same match stage."""
    return [
        {"$match": build_snippet_query(snippet_filter)},
        {"$facet": {
            "items": [
                {"$sort": dict(build_sort(sort))},
                {"$skip": skip},
                {"$limit": limit},
            ],
            "total": [{"$count": "n"}],
        }},
    ]


class SnippetRepository(ISnippetRepository):
    """MongoDB-backed repository implementing the domain interface."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection

    async def insert(self, snippet: Snippet) -> Snippet:
        now = datetime.now(timezone.utc)
        saved = replace(snippet, id=None, created_at=now, updated_at=now)
        doc = self._to_doc(saved)
        with reported_db_errors("insert_snippet"):
            result = self._collection.insert_one(doc)
        saved.id = str(result.inserted_id) if result.inserted_id is not None else None
        return saved

    async def get_by_id(self, snippet_id: str, user_id: str) -> Optional[Snippet]:
        oid = to_object_id(snippet_id)
        if oid is None:
            return None
        with reported_db_errors("get_snippet"):
            doc = self._collection.find_one({"_id": oid, "user_id": user_id})
        return self._from_doc(doc) if isinstance(doc, dict) else None

    async def update_by_id(self, snippet_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Snippet]:
        oid = to_object_id(snippet_id)
        if oid is None:
            return None
        to_set = {k: v for k, v in fields.items() if not (k == "folder_id" and v is None)}
        to_set["updated_at"] = datetime.now(timezone.utc)
        update: Dict[str, Any] = {"$set": to_set}
        if "folder_id" in fields and fields["folder_id"] is None:
            update["$unset"] = {"folder_id": ""}
        with reported_db_errors("update_snippet"):
            doc = self._collection.find_one_and_update(
                {"_id": oid, "user_id": user_id},
                update,
                return_document=ReturnDocument.AFTER,
            )
        return self._from_doc(doc) if isinstance(doc, dict) else None

    async def delete_by_id(self, snippet_id: str, user_id: str) -> bool:
        oid = to_object_id(snippet_id)
        if oid is None:
            return False
        with reported_db_errors("delete_snippet"):
            result = self._collection.delete_one({"_id": oid, "user_id": user_id})
        return int(getattr(result, "deleted_count", 0) or 0) > 0

    async def record_usage(self, snippet_id: str, user_id: str, used_at: datetime) -> Optional[Snippet]:
        oid = to_object_id(snippet_id)
        if oid is None:
            return None
        with reported_db_errors("record_usage"):
            doc = self._collection.find_one_and_update(
                {"_id": oid, "user_id": user_id},
                {
                    "$inc": {"usage_count": 1},
                    "$set": {"last_used_at": used_at, "updated_at": used_at},
                },
                return_document=ReturnDocument.AFTER,
            )
        return self._from_doc(doc) if isinstance(doc, dict) else None

    async def find(self, snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int) -> List[Snippet]:
        with reported_db_errors("find_snippets"):
            cursor = self._collection.find(
                build_snippet_query(snippet_filter),
                sort=build_sort(sort),
                skip=skip,
                limit=limit,
            )
            docs = list(cursor)
        return [self._from_doc(d) for d in docs if isinstance(d, dict)]

    async def count(self, snippet_filter: SnippetFilter) -> int:
        with reported_db_errors("count_snippets"):
            return int(self._collection.count_documents(build_snippet_query(snippet_filter)) or 0)

    async def find_page(
        self, snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int
    ) -> Tuple[List[Snippet], int]:
        # items and total come from the same $match pass
        with reported_db_errors("find_snippet_page"):
            rows = list(self._collection.aggregate(
                build_page_pipeline(snippet_filter, sort, skip, limit), allowDiskUse=True,
            ))
        facet = rows[0] if rows and isinstance(rows[0], dict) else {}
        counted = facet.get("total") or []
        total = int(counted[0].get("n", 0)) if counted else 0
        items = [self._from_doc(d) for d in facet.get("items") or [] if isinstance(d, dict)]
        return items, total

    async def clear_folder(self, folder_id: str, user_id: str) -> int:
        with reported_db_errors("clear_folder"):
            result = self._collection.update_many(
                {"user_id": user_id, "folder_id": folder_id},
                {"$unset": {"folder_id": ""}},
            )
        return int(getattr(result, "modified_count", 0) or 0)

    # ---------- Mapping helpers ----------
    def _to_doc(self, s: Snippet) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "user_id": s.user_id,
            "title": s.title,
            "description": s.description,
            "code": s.code,
            "language": s.language,
            "tags": list(s.tags or []),
            "auto_tags": list(s.auto_tags or []),
            "usage_count": int(s.usage_count or 0),
            "last_used_at": s.last_used_at,
            "created_at": s.created_at,
            "updated_at": s.updated_at,
        }
        if s.folder_id is not None:
            doc["folder_id"] = s.folder_id
        return doc

    def _from_doc(self, d: Dict[str, Any]) -> Snippet:
        folder_id = d.get("folder_id")
        return Snippet(
            id=str(d.get("_id")) if d.get("_id") is not None else None,
            user_id=str(d.get("user_id", "") or ""),
            title=str(d.get("title", "") or ""),
            description=str(d.get("description", "") or ""),
            code=str(d.get("code", "") or ""),
            language=str(d.get("language", "plaintext") or "plaintext"),
            tags=list(d.get("tags", []) or []),
            auto_tags=list(d.get("auto_tags", []) or []),
            folder_id=str(folder_id) if folder_id is not None else None,
            usage_count=int(d.get("usage_count", 0) or 0),
            last_used_at=d.get("last_used_at"),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
        )
