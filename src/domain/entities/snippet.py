from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

SUPPORTED_LANGUAGES = frozenset({
    "javascript",
    "typescript",
    "python",
    "java",
    "csharp",
    "cpp",
    "php",
    "ruby",
    "go",
    "rust",
    "swift",
    "kotlin",
    "bash",
    "html",
    "css",
    "sql",
    "json",
    "yaml",
    "markdown",
    "plaintext",
    "other",
})


def is_supported_language(language: Optional[str]) -> bool:
    return isinstance(language, str) and language in SUPPORTED_LANGUAGES


@dataclass
class Snippet:
    """Domain entity: a user's code snippet.

    Kept framework-free to allow use across layers. `tags` are user supplied;
    `auto_tags` are derived from `code` and `language` and only ever written
    by the classifier.
    """

    user_id: str
    title: str
    code: str
    language: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    auto_tags: List[str] = field(default_factory=list)
    folder_id: Optional[str] = None
    usage_count: int = 0
    last_used_at: Optional[datetime] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def all_tags(self) -> set:
        return set(self.tags or []) | set(self.auto_tags or [])
