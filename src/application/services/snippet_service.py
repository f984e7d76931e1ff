from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from observability import emit_event
from src.application.dto.create_snippet_dto import CreateSnippetDTO
from src.application.dto.update_snippet_dto import UpdateSnippetDTO
from src.domain.entities.snippet import Snippet
from src.domain.entities.snippet_query import Pagination, SnippetPage, SnippetQueryRequest
from src.domain.errors import InvalidRequestError, NotFoundError, ValidationError
from src.domain.interfaces.folder_repository_interface import IFolderRepository
from src.domain.interfaces.snippet_repository_interface import ISnippetRepository
from src.domain.services.query_planner import QueryPlanner
from src.domain.services.tag_classifier import TagClassifier

SNIPPET_NOT_FOUND = "Snippet not found"


class SnippetService:
    """Application service orchestrating snippet operations.

    Thin orchestration over domain + repository. No DB driver here.
    Auto tags are recomputed from scratch whenever code or language changes.
    """

    def __init__(
        self,
        snippet_repository: ISnippetRepository,
        tag_classifier: Optional[TagClassifier] = None,
        query_planner: Optional[QueryPlanner] = None,
        folder_repository: Optional[IFolderRepository] = None,
        *,
        max_code_size: Optional[int] = None,
        classify_in_thread_min_bytes: int = 16_384,
    ) -> None:
        self._repo = snippet_repository
        self._classifier = tag_classifier or TagClassifier()
        self._planner = query_planner or QueryPlanner()
        self._folders = folder_repository
        self._max_code_size = max_code_size
        self._thread_threshold = classify_in_thread_min_bytes

    async def create_snippet(self, dto: CreateSnippetDTO) -> Snippet:
        self._check_code_size(dto.code)
        if dto.folder_id is not None:
            await self._ensure_folder(dto.user_id, dto.folder_id)
        entity = Snippet(
            user_id=dto.user_id,
            title=dto.title,
            code=dto.code,
            language=dto.language,
            description=dto.description or "",
            tags=list(dto.tags or []),
            auto_tags=await self._classify(dto.code, dto.language),
            folder_id=dto.folder_id,
        )
        saved = await self._repo.insert(entity)
        emit_event(
            "snippet_created",
            user_id=dto.user_id,
            snippet_id=saved.id,
            language=saved.language,
            auto_tags=list(saved.auto_tags),
        )
        return saved

    async def get_snippet(self, user_id: str, snippet_id: str) -> Snippet:
        snippet = await self._repo.get_by_id(snippet_id, user_id)
        if snippet is None:
            raise NotFoundError(SNIPPET_NOT_FOUND)
        return snippet

    async def update_snippet(self, dto: UpdateSnippetDTO) -> Snippet:
        fields = dto.changes()
        if not fields:
            return await self.get_snippet(dto.user_id, dto.snippet_id)
        if "code" in fields:
            self._check_code_size(fields["code"])
        if fields.get("folder_id") is not None:
            await self._ensure_folder(dto.user_id, fields["folder_id"])

        if dto.touches_classification:
            current = await self.get_snippet(dto.user_id, dto.snippet_id)
            code = fields.get("code", current.code)
            language = fields.get("language", current.language)
            fields["auto_tags"] = await self._classify(code, language)

        updated = await self._repo.update_by_id(dto.snippet_id, dto.user_id, fields)
        if updated is None:
            raise NotFoundError(SNIPPET_NOT_FOUND)
        emit_event(
            "snippet_updated",
            user_id=dto.user_id,
            snippet_id=dto.snippet_id,
            fields=sorted(fields),
        )
        return updated

    async def delete_snippet(self, user_id: str, snippet_id: str) -> None:
        deleted = await self._repo.delete_by_id(snippet_id, user_id)
        if not deleted:
            raise NotFoundError(SNIPPET_NOT_FOUND)
        emit_event("snippet_deleted", user_id=user_id, snippet_id=snippet_id)

    async def record_usage(self, user_id: str, snippet_id: str) -> Snippet:
        snippet = await self._repo.record_usage(snippet_id, user_id, datetime.now(timezone.utc))
        if snippet is None:
            raise NotFoundError(SNIPPET_NOT_FOUND)
        emit_event(
            "snippet_usage_recorded",
            user_id=user_id,
            snippet_id=snippet_id,
            usage_count=snippet.usage_count,
        )
        return snippet

    async def list_snippets(self, user_id: str, request: SnippetQueryRequest) -> SnippetPage:
        try:
            query = self._planner.plan(request, user_id)
        except InvalidRequestError as e:
            emit_event("query_rejected", severity="warn", user_id=user_id, error=str(e))
            raise
        items, total = await self._repo.find_page(
            query.filter, query.sort, query.window.skip, query.window.limit
        )
        pagination = Pagination.from_total(total, query.window)
        emit_event(
            "snippets_listed",
            severity="debug",
            user_id=user_id,
            total=total,
            page=pagination.page,
            returned=len(items),
        )
        return SnippetPage(items=items, pagination=pagination)

    # ---------- Helpers ----------
    async def _classify(self, code: str, language: str) -> List[str]:
        if len(code.encode("utf-8")) >= self._thread_threshold:
            tags = await asyncio.to_thread(self._classifier.classify, code, language)
        else:
            tags = self._classifier.classify(code, language)
        # Stored sorted so persisted documents are stable
        return sorted(tags)

    def _check_code_size(self, code: str) -> None:
        if self._max_code_size is not None and len(code.encode("utf-8")) > self._max_code_size:
            raise ValidationError(f"Code exceeds the maximum size of {self._max_code_size} bytes")

    async def _ensure_folder(self, user_id: str, folder_id: str) -> None:
        if self._folders is None:
            return
        if await self._folders.get_by_id(folder_id, user_id) is None:
            raise NotFoundError("Folder not found")
