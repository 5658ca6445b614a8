from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..roles.model import Permissions


@dataclass(frozen=True)
class User:
    """A guard or staff account.

    Note: plain data object, no DB access here.
    """

    id: str
    organization_id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role_id: Optional[str] = None
    department_id: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class GuardView:
    """Read-model: a user joined with its role and department (no password hash)."""

    id: str
    organization_id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str]
    is_active: bool
    role_id: Optional[str]
    role_name: Optional[str]
    role_permissions: Optional[Permissions]
    department_id: Optional[str]
    department_name: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserSummary:
    id: str
    first_name: str
    last_name: str
    email: str
