from src.application.services.folder_service import FolderService
from src.application.services.snippet_service import SnippetService
from src.infrastructure.composition import get_folder_service, get_snippet_service, reset_services


def test_services_are_singletons():
    reset_services()
    try:
        first = get_snippet_service()
        assert isinstance(first, SnippetService)
        assert get_snippet_service() is first

        folders = get_folder_service()
        assert isinstance(folders, FolderService)
        assert get_folder_service() is folders
    finally:
        reset_services()


def test_snippet_service_is_wired_from_config():
    from config import config

    reset_services()
    try:
        service = get_snippet_service()
        assert service._max_code_size == config.MAX_CODE_SIZE
        assert service._thread_threshold == config.CLASSIFY_IN_THREAD_MIN_BYTES
    finally:
        reset_services()
