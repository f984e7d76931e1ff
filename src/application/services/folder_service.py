from __future__ import annotations

from typing import Any, List, Optional

from observability import emit_event
from src.application.dto.folder_dto import CreateFolderDTO, UpdateFolderDTO
from src.domain.entities.folder import Folder
from src.domain.entities.snippet_query import Pagination, SnippetPage, SnippetQueryRequest
from src.domain.errors import NotFoundError
from src.domain.interfaces.folder_repository_interface import IFolderRepository
from src.domain.interfaces.snippet_repository_interface import ISnippetRepository
from src.domain.services.query_planner import QueryPlanner

FOLDER_NOT_FOUND = "Folder not found"


class FolderService:
    """Folder CRUD. A folder only groups snippets through their `folder_id`.

    Deleting a folder clears that reference on the owner's snippets; the
    snippets themselves survive.
    """

    def __init__(
        self,
        folder_repository: IFolderRepository,
        snippet_repository: ISnippetRepository,
        query_planner: Optional[QueryPlanner] = None,
    ) -> None:
        self._folders = folder_repository
        self._snippets = snippet_repository
        self._planner = query_planner or QueryPlanner()

    async def create_folder(self, dto: CreateFolderDTO) -> Folder:
        folder = await self._folders.insert(
            Folder(user_id=dto.user_id, name=dto.name, description=dto.description or "")
        )
        emit_event("folder_created", user_id=dto.user_id, folder_id=folder.id)
        return folder

    async def get_folder(self, user_id: str, folder_id: str) -> Folder:
        folder = await self._folders.get_by_id(folder_id, user_id)
        if folder is None:
            raise NotFoundError(FOLDER_NOT_FOUND)
        return folder

    async def list_folders(self, user_id: str) -> List[Folder]:
        return await self._folders.list_for_user(user_id)

    async def update_folder(self, dto: UpdateFolderDTO) -> Folder:
        fields = dto.changes()
        if not fields:
            return await self.get_folder(dto.user_id, dto.folder_id)
        folder = await self._folders.update_by_id(dto.folder_id, dto.user_id, fields)
        if folder is None:
            raise NotFoundError(FOLDER_NOT_FOUND)
        return folder

    async def delete_folder(self, user_id: str, folder_id: str) -> int:
        """Delete the folder and return how many snippets had their reference cleared."""
        await self.get_folder(user_id, folder_id)
        cleared = await self._snippets.clear_folder(folder_id, user_id)
        if not await self._folders.delete_by_id(folder_id, user_id):
            raise NotFoundError(FOLDER_NOT_FOUND)
        emit_event("folder_deleted", user_id=user_id, folder_id=folder_id, snippets_cleared=cleared)
        return cleared

    async def list_folder_snippets(
        self,
        user_id: str,
        folder_id: str,
        page: Any = 1,
        limit: Any = None,
    ) -> SnippetPage:
        await self.get_folder(user_id, folder_id)
        query = self._planner.plan(
            SnippetQueryRequest(folder_id=folder_id, page=page, limit=limit),
            user_id,
        )
        items, total = await self._snippets.find_page(
            query.filter, query.sort, query.window.skip, query.window.limit
        )
        return SnippetPage(items=items, pagination=Pagination.from_total(total, query.window))
