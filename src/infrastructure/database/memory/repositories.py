from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from src.domain.entities.folder import Folder
from src.domain.entities.snippet import Snippet
from src.domain.entities.snippet_query import SnippetFilter, SortSpec
from src.domain.interfaces.folder_repository_interface import IFolderRepository
from src.domain.interfaces.snippet_repository_interface import ISnippetRepository


def _copy_snippet(s: Snippet, **changes: Any) -> Snippet:
    # Callers must never share list instances with the store
    changes.setdefault("tags", list(s.tags or []))
    changes.setdefault("auto_tags", list(s.auto_tags or []))
    return replace(s, **changes)


class InMemorySnippetRepository(ISnippetRepository):
    """Dict-backed store for tests and DB-less runs.

    Filtering goes through `SnippetFilter.matches`, so it is the reference
    semantics the MongoDB translation has to agree with. Missing values sort
    lowest, as they do in MongoDB.
    """

    def __init__(self) -> None:
        self._items: Dict[str, Tuple[int, Snippet]] = {}
        self._seq = 0

    async def insert(self, snippet: Snippet) -> Snippet:
        now = datetime.now(timezone.utc)
        self._seq += 1
        saved = _copy_snippet(snippet, id=uuid.uuid4().hex, created_at=now, updated_at=now)
        self._items[saved.id] = (self._seq, saved)
        return _copy_snippet(saved)

    async def get_by_id(self, snippet_id: str, user_id: str) -> Optional[Snippet]:
        stored = self._owned(snippet_id, user_id)
        return _copy_snippet(stored) if stored else None

    async def update_by_id(self, snippet_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Snippet]:
        stored = self._owned(snippet_id, user_id)
        if stored is None:
            return None
        changes = dict(fields)
        for key in ("tags", "auto_tags"):
            if key in changes:
                changes[key] = list(changes[key] or [])
        changes["updated_at"] = datetime.now(timezone.utc)
        updated = _copy_snippet(stored, **changes)
        self._items[snippet_id] = (self._items[snippet_id][0], updated)
        return _copy_snippet(updated)

    async def delete_by_id(self, snippet_id: str, user_id: str) -> bool:
        if self._owned(snippet_id, user_id) is None:
            return False
        del self._items[snippet_id]
        return True

    async def record_usage(self, snippet_id: str, user_id: str, used_at: datetime) -> Optional[Snippet]:
        stored = self._owned(snippet_id, user_id)
        if stored is None:
            return None
        return await self.update_by_id(snippet_id, user_id, {
            "usage_count": stored.usage_count + 1,
            "last_used_at": used_at,
        })

    async def find(self, snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int) -> List[Snippet]:
        matched = self._sorted_matches(snippet_filter, sort)
        return [_copy_snippet(s) for _, s in matched[skip:skip + limit]]

    async def count(self, snippet_filter: SnippetFilter) -> int:
        return sum(1 for _, s in self._items.values() if snippet_filter.matches(s))

    async def find_page(
        self, snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int
    ) -> Tuple[List[Snippet], int]:
        # No await between matching and slicing, so both halves see the same state
        matched = self._sorted_matches(snippet_filter, sort)
        return [_copy_snippet(s) for _, s in matched[skip:skip + limit]], len(matched)

    def _sorted_matches(self, snippet_filter: SnippetFilter, sort: SortSpec) -> List[Tuple[int, Snippet]]:
        matched = [(seq, s) for seq, s in self._items.values() if snippet_filter.matches(s)]

        def sort_key(entry: Tuple[int, Snippet]):
            seq, s = entry
            value = getattr(s, sort.field, None)
            return (value is not None, value if value is not None else 0, seq)

        matched.sort(key=sort_key, reverse=sort.descending)
        return matched

    async def clear_folder(self, folder_id: str, user_id: str) -> int:
        cleared = 0
        for snippet_id, (seq, s) in list(self._items.items()):
            if s.user_id == user_id and s.folder_id == folder_id:
                self._items[snippet_id] = (seq, _copy_snippet(s, folder_id=None))
                cleared += 1
        return cleared

    def _owned(self, snippet_id: str, user_id: str) -> Optional[Snippet]:
        entry = self._items.get(snippet_id)
        if entry is None or entry[1].user_id != user_id:
            return None
        return entry[1]


class InMemoryFolderRepository(IFolderRepository):
    def __init__(self) -> None:
        self._items: Dict[str, Folder] = {}

    async def insert(self, folder: Folder) -> Folder:
        now = datetime.now(timezone.utc)
        saved = replace(folder, id=uuid.uuid4().hex, created_at=now, updated_at=now)
        self._items[saved.id] = saved
        return replace(saved)

    async def get_by_id(self, folder_id: str, user_id: str) -> Optional[Folder]:
        folder = self._items.get(folder_id)
        if folder is None or folder.user_id != user_id:
            return None
        return replace(folder)

    async def list_for_user(self, user_id: str) -> List[Folder]:
        owned = [f for f in self._items.values() if f.user_id == user_id]
        return [replace(f) for f in sorted(owned, key=lambda f: f.name)]

    async def update_by_id(self, folder_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Folder]:
        if await self.get_by_id(folder_id, user_id) is None:
            return None
        updated = replace(self._items[folder_id], updated_at=datetime.now(timezone.utc), **fields)
        self._items[folder_id] = updated
        return replace(updated)

    async def delete_by_id(self, folder_id: str, user_id: str) -> bool:
        if await self.get_by_id(folder_id, user_id) is None:
            return False
        del self._items[folder_id]
        return True
