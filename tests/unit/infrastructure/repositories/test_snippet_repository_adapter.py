from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from src.domain.entities.snippet import Snippet
from src.domain.entities.snippet_query import SnippetFilter, SortSpec
from src.infrastructure.database.mongodb.repositories.snippet_repository import (
    SnippetRepository,
    build_page_pipeline,
    build_snippet_query,
    build_sort,
)


class FakeCollection:
    """Records driver calls and replays canned documents."""

    def __init__(self, docs=None, doc=None):
        self.calls = []
        self.docs = list(docs or [])
        self.doc = doc
        self.inserted = None

    def insert_one(self, doc):
        self.calls.append(("insert_one", doc))
        self.inserted = dict(doc)
        return SimpleNamespace(inserted_id=ObjectId())

    def find_one(self, flt):
        self.calls.append(("find_one", flt))
        return self.doc

    def find_one_and_update(self, flt, update, **kwargs):
        self.calls.append(("find_one_and_update", flt, update, kwargs))
        return self.doc

    def delete_one(self, flt):
        self.calls.append(("delete_one", flt))
        return SimpleNamespace(deleted_count=1 if self.doc else 0)

    def update_many(self, flt, update):
        self.calls.append(("update_many", flt, update))
        return SimpleNamespace(modified_count=len(self.docs))

    def find(self, flt, **kwargs):
        self.calls.append(("find", flt, kwargs))
        return iter(self.docs)

    def count_documents(self, flt):
        self.calls.append(("count_documents", flt))
        return len(self.docs)

    def aggregate(self, pipeline, **kwargs):
        self.calls.append(("aggregate", pipeline, kwargs))
        if not self.docs:
            return iter([{"items": [], "total": []}])
        return iter([{"items": self.docs, "total": [{"n": len(self.docs)}]}])


def _doc(**overrides):
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    doc = {
        "_id": ObjectId(),
        "user_id": "u1",
        "title": "Load",
        "description": "",
        "code": "await load()",
        "language": "javascript",
        "tags": ["mine"],
        "auto_tags": ["async"],
        "folder_id": "f1",
        "usage_count": 2,
        "last_used_at": None,
        "created_at": now,
        "updated_at": now,
    }
    doc.update(overrides)
    return doc


def test_query_is_always_owner_scoped():
    assert build_snippet_query(SnippetFilter(user_id="u1")) == {"user_id": "u1"}


def test_search_is_escaped_and_case_insensitive():
    query = build_snippet_query(SnippetFilter(user_id="u1", search="a.b(c"))
    pattern = {"$regex": r"a\.b\(c", "$options": "i"}
    assert query["$and"] == [{"$or": [{"title": pattern}, {"code": pattern}, {"description": pattern}]}]


def test_tags_match_user_or_auto_tags():
    query = build_snippet_query(SnippetFilter(user_id="u1", tags=frozenset({"loop", "api"})))
    assert query["$and"] == [{"$or": [
        {"tags": {"$in": ["api", "loop"]}},
        {"auto_tags": {"$in": ["api", "loop"]}},
    ]}]


def test_all_conditions_combined():
    query = build_snippet_query(SnippetFilter(
        user_id="u1", search="x", language="go", tags=frozenset({"loop"}), folder_id="f1",
    ))
    assert query["user_id"] == "u1"
    assert query["language"] == "go"
    assert query["folder_id"] == "f1"
    assert len(query["$and"]) == 2


def test_sort_has_id_tie_breaker():
    assert build_sort(SortSpec(field="title", descending=False)) == [("title", 1), ("_id", 1)]
    assert build_sort(SortSpec()) == [("created_at", -1), ("_id", -1)]


@pytest.mark.asyncio
async def test_insert_maps_fields_and_assigns_id():
    coll = FakeCollection()
    repo = SnippetRepository(coll)

    saved = await repo.insert(Snippet(
        user_id="u1", title="t", code="x", language="python", tags=["a"], auto_tags=["loop"],
    ))

    assert ObjectId.is_valid(saved.id)
    assert coll.inserted["user_id"] == "u1"
    assert coll.inserted["auto_tags"] == ["loop"]
    assert "folder_id" not in coll.inserted
    assert "_id" not in coll.inserted


@pytest.mark.asyncio
async def test_get_by_id_maps_document_and_scopes_owner():
    doc = _doc()
    coll = FakeCollection(doc=doc)
    repo = SnippetRepository(coll)

    snippet = await repo.get_by_id(str(doc["_id"]), "u1")

    assert snippet.id == str(doc["_id"])
    assert snippet.tags == ["mine"] and snippet.auto_tags == ["async"]
    assert snippet.folder_id == "f1"
    assert snippet.usage_count == 2
    assert coll.calls == [("find_one", {"_id": doc["_id"], "user_id": "u1"})]


@pytest.mark.asyncio
async def test_malformed_id_is_not_found_without_store_call():
    coll = FakeCollection(doc=_doc())
    repo = SnippetRepository(coll)

    assert await repo.get_by_id("not-an-id", "u1") is None
    assert await repo.delete_by_id("not-an-id", "u1") is False
    assert await repo.update_by_id("not-an-id", "u1", {"title": "x"}) is None
    assert coll.calls == []


@pytest.mark.asyncio
async def test_update_unsets_cleared_folder():
    doc = _doc(folder_id=None)
    coll = FakeCollection(doc=doc)
    repo = SnippetRepository(coll)

    updated = await repo.update_by_id(str(doc["_id"]), "u1", {"folder_id": None, "title": "t2"})

    _, flt, update, kwargs = coll.calls[0]
    assert flt == {"_id": doc["_id"], "user_id": "u1"}
    assert update["$unset"] == {"folder_id": ""}
    assert update["$set"]["title"] == "t2"
    assert "folder_id" not in update["$set"]
    assert "updated_at" in update["$set"]
    assert kwargs["return_document"] is ReturnDocument.AFTER
    assert updated.folder_id is None


@pytest.mark.asyncio
async def test_record_usage_increments_counter():
    doc = _doc()
    coll = FakeCollection(doc=doc)
    repo = SnippetRepository(coll)
    used_at = datetime(2024, 5, 1, tzinfo=timezone.utc)

    await repo.record_usage(str(doc["_id"]), "u1", used_at)

    _, _, update, _ = coll.calls[0]
    assert update["$inc"] == {"usage_count": 1}
    assert update["$set"]["last_used_at"] == used_at


@pytest.mark.asyncio
async def test_find_passes_sort_and_window():
    coll = FakeCollection(docs=[_doc(), _doc(title="Other")])
    repo = SnippetRepository(coll)
    flt = SnippetFilter(user_id="u1", language="javascript")

    items = await repo.find(flt, SortSpec(field="title", descending=False), skip=10, limit=5)
    total = await repo.count(flt)

    assert [s.title for s in items] == ["Load", "Other"]
    assert total == 2
    _, query, kwargs = coll.calls[0]
    assert query == {"user_id": "u1", "language": "javascript"}
    assert kwargs == {"sort": [("title", 1), ("_id", 1)], "skip": 10, "limit": 5}
    assert coll.calls[1] == ("count_documents", query)


@pytest.mark.asyncio
async def test_clear_folder_is_owner_scoped():
    coll = FakeCollection(docs=[_doc(), _doc()])
    repo = SnippetRepository(coll)

    assert await repo.clear_folder("f1", "u1") == 2
    assert coll.calls == [("update_many", {"user_id": "u1", "folder_id": "f1"}, {"$unset": {"folder_id": ""}})]


@pytest.mark.asyncio
async def test_driver_errors_are_reported_and_reraised(monkeypatch):
    import src.infrastructure.database.mongodb.repositories.snippet_repository as mod

    events = []
    monkeypatch.setattr(mod, "emit_event", lambda event, **fields: events.append((event, fields)))

    class BrokenCollection(FakeCollection):
        def count_documents(self, flt):
            raise PyMongoError("down")

    with pytest.raises(PyMongoError):
        await SnippetRepository(BrokenCollection()).count(SnippetFilter(user_id="u1"))

    assert events and events[0][0] == "db_count_snippets_error"
    assert events[0][1]["severity"] == "error"


def test_page_pipeline_counts_and_windows_one_match_stage():
    flt = SnippetFilter(user_id="u1", language="go")
    pipeline = build_page_pipeline(flt, SortSpec(field="title", descending=False), skip=5, limit=5)

    assert pipeline[0] == {"$match": {"user_id": "u1", "language": "go"}}
    assert len(pipeline) == 2
    facet = pipeline[1]["$facet"]
    assert facet["items"] == [{"$sort": {"title": 1, "_id": 1}}, {"$skip": 5}, {"$limit": 5}]
    assert facet["total"] == [{"$count": "n"}]


@pytest.mark.asyncio
async def test_find_page_is_a_single_aggregate():
    coll = FakeCollection(docs=[_doc(), _doc(title="Other")])
    repo = SnippetRepository(coll)

    items, total = await repo.find_page(SnippetFilter(user_id="u1"), SortSpec(), skip=0, limit=10)

    assert [s.title for s in items] == ["Load", "Other"]
    assert total == 2
    assert len(coll.calls) == 1
    name, _, kwargs = coll.calls[0]
    assert name == "aggregate"
    assert kwargs == {"allowDiskUse": True}


@pytest.mark.asyncio
async def test_find_page_with_no_matches_is_empty():
    repo = SnippetRepository(FakeCollection())

    assert await repo.find_page(SnippetFilter(user_id="u1"), SortSpec(), skip=0, limit=10) == ([], 0)
