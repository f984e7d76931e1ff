from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Folder:
    """Domain entity: a named group of snippets.

    Snippets point at a folder through `Snippet.folder_id`; the folder does
    not own them.
    """

    user_id: str
    name: str
    description: str = ""
    id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
