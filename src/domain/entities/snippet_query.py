from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence, Union

from src.domain.entities.snippet import Snippet

# Accepted sort keys (wire spelling and attribute spelling) -> Snippet attribute
SORT_FIELDS: Mapping[str, str] = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "title": "title",
    "language": "language",
    "usageCount": "usage_count",
    "usage_count": "usage_count",
    "lastUsedAt": "last_used_at",
    "last_used_at": "last_used_at",
}

DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "desc"


@dataclass(frozen=True)
class SnippetQueryRequest:
    """Raw list/search request, before validation.

    `page` and `limit` may arrive as strings straight from a query string;
    the planner converts and validates them.
    """

    search: Optional[str] = None
    language: Optional[str] = None
    tags: Union[str, Sequence[str], None] = None
    folder_id: Optional[str] = None
    sort_by: Optional[str] = DEFAULT_SORT_BY
    sort_order: Optional[str] = DEFAULT_SORT_ORDER
    page: Any = 1
    limit: Any = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SnippetQueryRequest":
        """Build a request from query-string style parameters (camelCase or snake_case)."""

        def pick(*keys: str) -> Any:
            for key in keys:
                value = params.get(key)
                if value is not None and value != "":
                    return value
            return None

        page = pick("page")
        return cls(
            search=pick("search", "q"),
            language=pick("language"),
            tags=pick("tags", "tag"),
            folder_id=pick("folderId", "folder_id"),
            sort_by=pick("sortBy", "sort_by") or DEFAULT_SORT_BY,
            sort_order=pick("sortOrder", "sort_order") or DEFAULT_SORT_ORDER,
            page=page if page is not None else 1,
            limit=pick("limit", "per_page"),
        )


@dataclass(frozen=True)
class SnippetFilter:
    """Normalized predicate. All present conditions are ANDed; `user_id` is always present."""

    user_id: str
    search: Optional[str] = None
    language: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    folder_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.user_id, str) or not self.user_id:
            raise ValueError("SnippetFilter requires an owner user_id")

    def matches(self, snippet: Snippet) -> bool:
        if snippet.user_id != self.user_id:
            return False
        if self.search:
            needle = self.search.casefold()
            haystacks = (snippet.title or "", snippet.code or "", snippet.description or "")
            if not any(needle in h.casefold() for h in haystacks):
                return False
        if self.language is not None and snippet.language != self.language:
            return False
        if self.tags and not (self.tags & snippet.all_tags):
            return False
        if self.folder_id is not None and snippet.folder_id != self.folder_id:
            return False
        return True


@dataclass(frozen=True)
class SortSpec:
    field: str = "created_at"
    descending: bool = True

    @property
    def direction(self) -> int:
        return -1 if self.descending else 1


@dataclass(frozen=True)
class PageWindow:
    page: int = 1
    limit: int = 10

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SnippetQuery:
    filter: SnippetFilter
    sort: SortSpec
    window: PageWindow


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def from_total(cls, total: int, window: PageWindow) -> "Pagination":
        return cls(
            total=total,
            page=window.page,
            limit=window.limit,
            pages=math.ceil(total / window.limit),
        )

    def to_dict(self) -> dict:
        return {"total": self.total, "page": self.page, "limit": self.limit, "pages": self.pages}


@dataclass
class SnippetPage:
    items: List[Snippet] = field(default_factory=list)
    pagination: Pagination = field(default_factory=lambda: Pagination(0, 1, 10, 0))
