from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import TokenType
from .model import RegistrationToken


class RegistrationTokenRepository(Protocol):
    def get_by_id(self, token_id: str) -> Optional[RegistrationToken]:
        raise NotImplementedError

    def get_by_token(self, token: str, *, active_only: bool = False) -> Optional[RegistrationToken]:
        """Lookup by token value, joined with role/department/organization names."""
        raise NotImplementedError

    def token_exists(self, token: str) -> bool:
        raise NotImplementedError

    def list_active(self, organization_id: str) -> Sequence[RegistrationToken]:
        raise NotImplementedError

    def create(
        self,
        *,
        organization_id: str,
        token: str,
        token_type: TokenType,
        role_id: Optional[str],
        department_id: Optional[str],
        expires_at: Optional[datetime],
        usage_limit: Optional[int],
        created_by: Optional[str],
        metadata: dict,
    ) -> RegistrationToken:
        raise NotImplementedError

    def update(self, token_id: str, changes: Dict[str, Any]) -> Optional[RegistrationToken]:
        raise NotImplementedError

    def delete(self, token_id: str) -> bool:
        raise NotImplementedError

    def increment_usage(self, token_id: str) -> Optional[RegistrationToken]:
        raise NotImplementedError
