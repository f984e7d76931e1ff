from __future__ import annotations

# Public API of the composition root
from .container import get_folder_service, get_snippet_service, reset_services  # noqa: F401
