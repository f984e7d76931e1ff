from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from src.domain.entities.folder import Folder


class IFolderRepository(ABC):
    """Repository interface for Folder domain entity, scoped per owner."""

    @abstractmethod
    async def insert(self, folder: Folder) -> Folder:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, folder_id: str, user_id: str) -> Optional[Folder]:
        raise NotImplementedError

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[Folder]:  # sorted by name
        raise NotImplementedError

    @abstractmethod
    async def update_by_id(self, folder_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Folder]:
        raise NotImplementedError

    @abstractmethod
    async def delete_by_id(self, folder_id: str, user_id: str) -> bool:
        raise NotImplementedError
