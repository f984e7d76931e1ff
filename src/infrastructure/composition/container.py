from __future__ import annotations

import threading
from typing import Optional


_snippet_service_singleton = None  # type: Optional["SnippetService"]
_folder_service_singleton = None  # type: Optional["FolderService"]
_singleton_lock = threading.Lock()
_logging_configured = False


def _ensure_logging() -> None:
    global _logging_configured
    if _logging_configured:
        return
    from config import config
    from observability import setup_structlog_logging

    setup_structlog_logging(config.LOG_LEVEL)
    _logging_configured = True


def _build_repositories():
    # Lazy imports keep the database connection out of import time
    from database import db  # type: ignore
    from src.infrastructure.database.mongodb.repositories.folder_repository import FolderRepository
    from src.infrastructure.database.mongodb.repositories.snippet_repository import SnippetRepository

    return SnippetRepository(db.snippets_collection), FolderRepository(db.folders_collection)


def _build_planner():
    from config import config
    from src.domain.services.query_planner import QueryPlanner

    return QueryPlanner(default_limit=config.DEFAULT_PAGE_SIZE)


def get_snippet_service():
    """
    Composition Root: build and return a singleton SnippetService.
    Keeps construction inside infrastructure, so callers only depend on the application layer.
    """
    global _snippet_service_singleton
    if _snippet_service_singleton is not None:
        return _snippet_service_singleton

    # Ensure singleton creation is thread-safe under concurrent first requests
    with _singleton_lock:
        if _snippet_service_singleton is not None:
            return _snippet_service_singleton

        from config import config
        from src.application.services.snippet_service import SnippetService
        from src.domain.services.tag_classifier import TagClassifier

        _ensure_logging()
        snippets, folders = _build_repositories()
        _snippet_service_singleton = SnippetService(
            snippet_repository=snippets,
            tag_classifier=TagClassifier(),
            query_planner=_build_planner(),
            folder_repository=folders,
            max_code_size=config.MAX_CODE_SIZE,
            classify_in_thread_min_bytes=config.CLASSIFY_IN_THREAD_MIN_BYTES,
        )
        return _snippet_service_singleton


def get_folder_service():
    """Composition Root: singleton FolderService sharing the same collections."""
    global _folder_service_singleton
    if _folder_service_singleton is not None:
        return _folder_service_singleton

    with _singleton_lock:
        if _folder_service_singleton is not None:
            return _folder_service_singleton

        from src.application.services.folder_service import FolderService

        _ensure_logging()
        snippets, folders = _build_repositories()
        _folder_service_singleton = FolderService(
            folder_repository=folders,
            snippet_repository=snippets,
            query_planner=_build_planner(),
        )
        return _folder_service_singleton


def reset_services() -> None:
    """Drop cached singletons (tests)."""
    global _snippet_service_singleton, _folder_service_singleton
    with _singleton_lock:
        _snippet_service_singleton = None
        _folder_service_singleton = None
