from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.application.dto.create_snippet_dto import require_user_id
from src.domain.errors import ValidationError


@dataclass
class CreateFolderDTO:
    user_id: str
    name: str
    description: Optional[str] = None

    def __post_init__(self) -> None:
        require_user_id(self.user_id)
        self.name = self.name.strip() if isinstance(self.name, str) else self.name
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError("Name is required")
        self.description = (self.description or "").strip()


@dataclass
class UpdateFolderDTO:
    user_id: str
    folder_id: str
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        require_user_id(self.user_id)
        if not isinstance(self.folder_id, str) or not self.folder_id:
            raise ValidationError("folder_id is required")
        if self.name is not None:
            self.name = self.name.strip() if isinstance(self.name, str) else self.name
            if not isinstance(self.name, str) or not self.name:
                raise ValidationError("Name cannot be empty")
        if self.description is not None:
            self.description = str(self.description).strip()

    def changes(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if self.name is not None:
            fields["name"] = self.name
        if self.description is not None:
            fields["description"] = self.description
        return fields
