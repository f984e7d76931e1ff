from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument

from src.domain.entities.folder import Folder
from src.domain.interfaces.folder_repository_interface import IFolderRepository
from src.infrastructure.database.mongodb.repositories.snippet_repository import (
    reported_db_errors,
    to_object_id,
)


class FolderRepository(IFolderRepository):
    """MongoDB-backed folder storage."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection

    async def insert(self, folder: Folder) -> Folder:
        now = datetime.now(timezone.utc)
        saved = replace(folder, id=None, created_at=now, updated_at=now)
        with reported_db_errors("insert_folder"):
            result = self._collection.insert_one({
                "user_id": saved.user_id,
                "name": saved.name,
                "description": saved.description,
                "created_at": saved.created_at,
                "updated_at": saved.updated_at,
            })
        saved.id = str(result.inserted_id) if result.inserted_id is not None else None
        return saved

    async def get_by_id(self, folder_id: str, user_id: str) -> Optional[Folder]:
        oid = to_object_id(folder_id)
        if oid is None:
            return None
        with reported_db_errors("get_folder"):
            doc = self._collection.find_one({"_id": oid, "user_id": user_id})
        return self._from_doc(doc) if isinstance(doc, dict) else None

    async def list_for_user(self, user_id: str) -> List[Folder]:
        with reported_db_errors("list_folders"):
            docs = list(self._collection.find({"user_id": user_id}, sort=[("name", ASCENDING)]))
        return [self._from_doc(d) for d in docs if isinstance(d, dict)]

    async def update_by_id(self, folder_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Folder]:
        oid = to_object_id(folder_id)
        if oid is None:
            return None
        to_set = dict(fields)
        to_set["updated_at"] = datetime.now(timezone.utc)
        with reported_db_errors("update_folder"):
            doc = self._collection.find_one_and_update(
                {"_id": oid, "user_id": user_id},
                {"$set": to_set},
                return_document=ReturnDocument.AFTER,
            )
        return self._from_doc(doc) if isinstance(doc, dict) else None

    async def delete_by_id(self, folder_id: str, user_id: str) -> bool:
        oid = to_object_id(folder_id)
        if oid is None:
            return False
        with reported_db_errors("delete_folder"):
            result = self._collection.delete_one({"_id": oid, "user_id": user_id})
        return int(getattr(result, "deleted_count", 0) or 0) > 0

    def _from_doc(self, d: Dict[str, Any]) -> Folder:
        return Folder(
            id=str(d.get("_id")) if d.get("_id") is not None else None,
            user_id=str(d.get("user_id", "") or ""),
            name=str(d.get("name", "") or ""),
            description=str(d.get("description", "") or ""),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
        )
