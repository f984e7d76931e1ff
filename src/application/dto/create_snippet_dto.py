from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from src.domain.entities.snippet import is_supported_language
from src.domain.errors import ValidationError


def require_user_id(user_id: Any) -> None:
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("user_id must be a non-empty string")


def normalize_tags(tags: Any) -> List[str]:
    """Trim, drop empties and de-duplicate user tags, keeping first-seen order."""
    if tags is None:
        return []
    if isinstance(tags, str) or not isinstance(tags, (list, tuple, set, frozenset)):
        raise ValidationError("tags must be a list of strings")
    seen: List[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("tags must be a list of strings")
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


@dataclass
class CreateSnippetDTO:
    user_id: str
    title: str
    code: str
    language: str
    description: Optional[str] = None
    tags: Optional[List[str]] = field(default=None)
    folder_id: Optional[str] = None

    def __post_init__(self) -> None:
        require_user_id(self.user_id)
        self.title = (self.title or "").strip() if isinstance(self.title, str) else self.title
        if not isinstance(self.title, str) or not self.title:
            raise ValidationError("Title is required")
        if not isinstance(self.code, str) or not self.code:
            raise ValidationError("Code is required")
        if not is_supported_language(self.language):
            raise ValidationError("Invalid language")
        self.description = (self.description or "").strip()
        self.tags = normalize_tags(self.tags)
        if self.folder_id is not None and (not isinstance(self.folder_id, str) or not self.folder_id):
            raise ValidationError("Invalid folder ID")
