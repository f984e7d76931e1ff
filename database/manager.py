import logging
import os
from datetime import timezone
from types import SimpleNamespace
from typing import Any, Dict, Optional, Protocol

from pymongo import ASCENDING, DESCENDING, IndexModel, MongoClient

from config import config
from observability import emit_event

logger = logging.getLogger(__name__)


class CollectionLike(Protocol):
    def insert_one(self, *args: Any, **kwargs: Any) -> Any: ...
    def update_many(self, *args: Any, **kwargs: Any) -> Any: ...
    def delete_one(self, *args: Any, **kwargs: Any) -> Any: ...
    def find_one(self, *args: Any, **kwargs: Any) -> Any: ...
    def find_one_and_update(self, *args: Any, **kwargs: Any) -> Any: ...
    def find(self, *args: Any, **kwargs: Any) -> Any: ...
    def count_documents(self, *args: Any, **kwargs: Any) -> int: ...
    def aggregate(self, *args: Any, **kwargs: Any) -> Any: ...
    def create_indexes(self, *args: Any, **kwargs: Any) -> Any: ...


class NoOpCollection:
    """Minimal PyMongo-compatible collection used when the database is disabled."""

    def insert_one(self, *args: Any, **kwargs: Any) -> Any:
        return SimpleNamespace(inserted_id=None)

    def update_many(self, *args: Any, **kwargs: Any) -> Any:
        return SimpleNamespace(acknowledged=True, matched_count=0, modified_count=0)

    def delete_one(self, *args: Any, **kwargs: Any) -> Any:
        return SimpleNamespace(deleted_count=0)

    def find_one(self, *args: Any, **kwargs: Any) -> Any:
        return None

    def find_one_and_update(self, *args: Any, **kwargs: Any) -> Any:
        return None

    def find(self, *args: Any, **kwargs: Any) -> Any:
        return []

    def count_documents(self, *args: Any, **kwargs: Any) -> int:
        return 0

    def aggregate(self, *args: Any, **kwargs: Any) -> Any:
        return []

    def create_indexes(self, *args: Any, **kwargs: Any) -> Any:
        return None


class DatabaseManager:
    """Owns the MongoDB connection and the snippet/folder collection indexes."""

    client: Optional[Any]
    db: Optional[Any]
    snippets_collection: CollectionLike
    folders_collection: CollectionLike

    def __init__(self) -> None:
        self.client = None
        self.db = None
        self.snippets_collection = NoOpCollection()
        self.folders_collection = NoOpCollection()
        self.connect()

    def connect(self) -> None:
        # Docs build / CI: the connection can be disabled entirely
        disable_db = str(os.getenv("DISABLE_DB", "")).lower() in {"1", "true", "yes"}
        if disable_db:
            self.client = None
            self.db = None
            self.snippets_collection = NoOpCollection()
            self.folders_collection = NoOpCollection()
            emit_event("db_disabled", reason="docs_or_ci_mode")
            return

        client_kwargs: Dict[str, Any] = {
            "maxPoolSize": config.MONGODB_MAX_POOL_SIZE,
            "minPoolSize": config.MONGODB_MIN_POOL_SIZE,
            "serverSelectionTimeoutMS": config.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            "socketTimeoutMS": config.MONGODB_SOCKET_TIMEOUT_MS,
            "connectTimeoutMS": config.MONGODB_CONNECT_TIMEOUT_MS,
            "retryWrites": True,
            "retryReads": True,
            "tz_aware": True,
            "tzinfo": timezone.utc,
        }
        if config.MONGODB_APPNAME:
            client_kwargs["appname"] = config.MONGODB_APPNAME

        try:
            self.client = MongoClient(config.MONGODB_URL, **client_kwargs)
            self.db = self.client[config.DATABASE_NAME]
            self.snippets_collection = self.db[config.SNIPPETS_COLLECTION]
            self.folders_collection = self.db[config.FOLDERS_COLLECTION]
            self.client.admin.command("ping")
            self._create_indexes()
            emit_event("db_connected", severity="info", database=config.DATABASE_NAME)
        except Exception as e:
            emit_event("db_connection_failed", severity="error", error=str(e))
            raise

    def _create_indexes(self) -> None:
        snippet_indexes = [
            IndexModel([("user_id", ASCENDING), ("created_at", DESCENDING)], name="user_created_idx"),
            IndexModel([("user_id", ASCENDING), ("title", ASCENDING)], name="user_title_idx"),
            IndexModel([("user_id", ASCENDING), ("tags", ASCENDING)], name="user_tags_idx"),
            IndexModel([("user_id", ASCENDING), ("auto_tags", ASCENDING)], name="user_auto_tags_idx"),
            IndexModel([("user_id", ASCENDING), ("language", ASCENDING)], name="user_lang_idx"),
            IndexModel([("user_id", ASCENDING), ("folder_id", ASCENDING)], name="user_folder_idx"),
        ]
        folder_indexes = [
            IndexModel([("user_id", ASCENDING), ("name", ASCENDING)], name="user_name_idx"),
        ]
        try:
            self.snippets_collection.create_indexes(snippet_indexes)
            self.folders_collection.create_indexes(folder_indexes)
        except Exception as e:
            # Index conflicts must not block startup; queries still work without them
            emit_event("db_create_indexes_error", severity="warn", error=str(e))
