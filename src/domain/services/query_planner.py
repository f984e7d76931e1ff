"""
Domain service: turn a raw list/search request into an executable query.

The planner never touches a store. It validates the request, normalizes it
into an owner-scoped `SnippetFilter`, a `SortSpec` and a `PageWindow`, and
leaves execution to a repository.
"""

from __future__ import annotations

from typing import AbstractSet, Any, FrozenSet, Optional

from src.domain.entities.snippet import SUPPORTED_LANGUAGES
from src.domain.entities.snippet_query import (
    DEFAULT_SORT_BY,
    DEFAULT_SORT_ORDER,
    SORT_FIELDS,
    PageWindow,
    SnippetFilter,
    SnippetQuery,
    SnippetQueryRequest,
    SortSpec,
)
from src.domain.errors import InvalidRequestError


class QueryPlanner:
    def __init__(
        self,
        default_limit: int = 10,
        languages: AbstractSet[str] = SUPPORTED_LANGUAGES,
    ) -> None:
        self._default_limit = default_limit
        self._languages = languages

    def plan(self, request: SnippetQueryRequest, user_id: str) -> SnippetQuery:
        """Validate `request` and build a query scoped to `user_id`.

        Raises InvalidRequestError for an unknown sort field or order,
        non-positive paging values, or a language outside the supported set.
        """
        if not isinstance(user_id, str) or not user_id:
            raise InvalidRequestError("user_id is required")

        snippet_filter = SnippetFilter(
            user_id=user_id,
            search=self._normalize_search(request.search),
            language=self._normalize_language(request.language),
            tags=self._normalize_tags(request.tags),
            folder_id=self._normalize_folder_id(request.folder_id),
        )
        # None means "not given"; empty strings and zero are still rejected
        sort = self._normalize_sort(
            request.sort_by if request.sort_by is not None else DEFAULT_SORT_BY,
            request.sort_order if request.sort_order is not None else DEFAULT_SORT_ORDER,
        )
        page = request.page if request.page is not None else 1
        limit = request.limit if request.limit is not None else self._default_limit
        window = PageWindow(
            page=self._positive_int("page", page),
            limit=self._positive_int("limit", limit),
        )
        return SnippetQuery(filter=snippet_filter, sort=sort, window=window)

    # ---------- Normalization helpers ----------
    @staticmethod
    def _normalize_search(search: Any) -> Optional[str]:
        if search is None:
            return None
        if not isinstance(search, str):
            raise InvalidRequestError("search must be a string")
        text = search.strip()
        return text or None

    def _normalize_language(self, language: Any) -> Optional[str]:
        if language is None or language == "":
            return None
        if not isinstance(language, str) or language not in self._languages:
            raise InvalidRequestError(f"Invalid language: {language!r}")
        return language

    @staticmethod
    def _normalize_tags(tags: Any) -> FrozenSet[str]:
        if tags is None:
            return frozenset()
        values = [tags] if isinstance(tags, str) else tags
        try:
            items = list(values)
        except TypeError:
            raise InvalidRequestError("tags must be a string or a list of strings") from None
        normalized = set()
        for item in items:
            if not isinstance(item, str):
                raise InvalidRequestError("tags must be a string or a list of strings")
            item = item.strip()
            if item:
                normalized.add(item)
        return frozenset(normalized)

    @staticmethod
    def _normalize_folder_id(folder_id: Any) -> Optional[str]:
        if folder_id is None or folder_id == "":
            return None
        return str(folder_id)

    @staticmethod
    def _normalize_sort(sort_by: Any, sort_order: Any) -> SortSpec:
        field = SORT_FIELDS.get(sort_by) if isinstance(sort_by, str) else None
        if field is None:
            raise InvalidRequestError(f"Unsupported sort field: {sort_by!r}")
        order = str(sort_order or "").strip().lower()
        if order not in {"asc", "desc"}:
            raise InvalidRequestError(f"sortOrder must be 'asc' or 'desc', got {sort_order!r}")
        return SortSpec(field=field, descending=(order == "desc"))

    @staticmethod
    def _positive_int(name: str, value: Any) -> int:
        # bool is an int subclass; True must not pass as page 1
        if isinstance(value, bool):
            raise InvalidRequestError(f"{name} must be a positive integer")
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
            # ASCII only: str.isdigit also accepts digits such as "²" that int() rejects
            number = int(value.strip())
        else:
            raise InvalidRequestError(f"{name} must be a positive integer")
        if number < 1:
            raise InvalidRequestError(f"{name} must be a positive integer")
        return number
