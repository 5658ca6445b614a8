from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Organization:
    """Tenant boundary: owns users, roles, locations and routes."""

    id: str
    name: str
    slug: str
    active_modules: list = field(default_factory=list)
    subscription_tier: str = "basic"
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Department:
    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
