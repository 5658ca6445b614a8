from __future__ import annotations

from typing import Optional, Protocol

from .model import ActivityEntry


class ActivityLogRepository(Protocol):
    """Append-only audit trail written by the feature services."""

    def record(
        self,
        *,
        organization_id: str,
        user_id: Optional[str],
        module: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> ActivityEntry:
        raise NotImplementedError
