from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ActivityEntry:
    id: str
    organization_id: str
    module: str
    action: str
    entity_type: str
    user_id: Optional[str] = None
    entity_id: Optional[str] = None
    metadata: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
