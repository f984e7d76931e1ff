from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from src.domain.entities.snippet import Snippet
from src.domain.entities.snippet_query import SnippetFilter, SortSpec


class ISnippetRepository(ABC):
    """Repository interface for Snippet domain entity.

    Domain defines the contract; infrastructure implements it. Every
    id-based call is scoped to `user_id`: a snippet owned by someone else is
    reported exactly like a missing one (None / False).
    """

    @abstractmethod
    async def insert(self, snippet: Snippet) -> Snippet:  # returns entity with id and timestamps
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, snippet_id: str, user_id: str) -> Optional[Snippet]:
        raise NotImplementedError

    @abstractmethod
    async def update_by_id(self, snippet_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Snippet]:
        raise NotImplementedError

    @abstractmethod
    async def delete_by_id(self, snippet_id: str, user_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def record_usage(self, snippet_id: str, user_id: str, used_at: datetime) -> Optional[Snippet]:
        raise NotImplementedError

    @abstractmethod
    async def find(self, snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int) -> List[Snippet]:
        raise NotImplementedError

    @abstractmethod
    async def count(self, snippet_filter: SnippetFilter) -> int:
        raise NotImplementedError

    @abstractmethod
    async def find_page(
        self, snippet_filter: SnippetFilter, sort: SortSpec, skip: int, limit: int
    ) -> Tuple[List[Snippet], int]:
        """One window of matches plus the total match count, read from the same snapshot."""
        raise NotImplementedError

    @abstractmethod
    async def clear_folder(self, folder_id: str, user_id: str) -> int:  # returns number of snippets touched
        raise NotImplementedError
