from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from src.application.dto.create_snippet_dto import normalize_tags, require_user_id
from src.domain.entities.snippet import is_supported_language
from src.domain.errors import ValidationError


@dataclass
class UpdateSnippetDTO:
    """Partial update. Fields left as None are not touched.

    `clear_folder=True` removes the folder reference; it cannot be combined
    with a new `folder_id`.
    """

    user_id: str
    snippet_id: str
    title: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    folder_id: Optional[str] = None
    clear_folder: bool = False

    def __post_init__(self) -> None:
        require_user_id(self.user_id)
        if not isinstance(self.snippet_id, str) or not self.snippet_id:
            raise ValidationError("snippet_id is required")
        if self.title is not None:
            self.title = self.title.strip() if isinstance(self.title, str) else self.title
            if not isinstance(self.title, str) or not self.title:
                raise ValidationError("Title cannot be empty")
        if self.code is not None and (not isinstance(self.code, str) or not self.code):
            raise ValidationError("Code cannot be empty")
        if self.language is not None and not is_supported_language(self.language):
            raise ValidationError("Invalid language")
        if self.description is not None:
            self.description = str(self.description).strip()
        if self.tags is not None:
            self.tags = normalize_tags(self.tags)
        if self.folder_id is not None:
            if not isinstance(self.folder_id, str) or not self.folder_id:
                raise ValidationError("Invalid folder ID")
            if self.clear_folder:
                raise ValidationError("folder_id and clear_folder are mutually exclusive")

    @property
    def touches_classification(self) -> bool:
        return self.code is not None or self.language is not None

    def changes(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for name in ("title", "code", "language", "description", "tags", "folder_id"):
            value = getattr(self, name)
            if value is not None:
                fields[name] = value
        if self.clear_folder:
            fields["folder_id"] = None
        return fields
