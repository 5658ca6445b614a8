from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import TokenType


@dataclass(frozen=True)
class RegistrationToken:
    """Self-service onboarding token (access code, QR link or invite).

    `role_name`, `department_name` and `organization_name` are filled only by
    lookups that join the referenced rows.
    """

    id: str
    organization_id: str
    token: str
    token_type: TokenType
    role_id: Optional[str] = None
    department_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    is_active: bool = True
    metadata: dict = field(default_factory=dict)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    role_name: Optional[str] = None
    department_name: Optional[str] = None
    organization_name: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    def is_exhausted(self) -> bool:
        return bool(self.usage_limit) and self.usage_count >= self.usage_limit
