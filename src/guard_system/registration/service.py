from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import (
    optional_float,
    optional_int,
    optional_str,
    parse_enum,
    require_min_length,
    require_non_empty,
)
from ..core.constants import SHORT_TOKEN_MAX_LENGTH, SUPER_ADMIN_PERMISSIONS
from ..core.enums import TokenType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..organizations.repository import DepartmentRepository, OrganizationRepository
from ..roles.repository import RoleRepository
from ..users.model import User
from ..users.repository import UserRepository
from .factory import TokenGeneratorFactory
from .model import RegistrationToken
from .repository import RegistrationTokenRepository

logger = logging.getLogger(__name__)

UPDATABLE_TOKEN_FIELDS = ("is_active", "usage_limit", "expires_at")


def normalize_token(value: Any) -> str:
    """Access codes are typed by hand: short values are matched upper-cased."""
    token = require_non_empty(value, "Token")
    return token.upper() if len(token) <= SHORT_TOKEN_MAX_LENGTH else token


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class TokenService:
    def __init__(
        self,
        tokens: RegistrationTokenRepository,
        factory: Optional[TokenGeneratorFactory] = None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tokens = tokens
        self._factory = factory or TokenGeneratorFactory()
        self._clock = clock

    def create_token(
        self,
        organization_id: str,
        *,
        created_by: Optional[str],
        token_type: Any,
        role_id: Optional[str] = None,
        department_id: Optional[str] = None,
        expires_in_hours: Any = None,
        usage_limit: Any = None,
        metadata: Optional[dict] = None,
    ) -> RegistrationToken:
        token_type = parse_enum(TokenType, token_type, "token_type")
        hours = optional_float(expires_in_hours, "expires_in_hours")
        limit = optional_int(usage_limit, "usage_limit")

        generator = self._factory.for_type(token_type)
        value = generator.generate(exists=self._tokens.token_exists)

        expires_at = self._clock() + timedelta(hours=hours) if hours else None
        token = self._tokens.create(
            organization_id=organization_id,
            token=value,
            token_type=token_type,
            role_id=role_id or None,
            department_id=department_id or None,
            expires_at=expires_at,
            usage_limit=limit,
            created_by=created_by,
            metadata=metadata or {},
        )
        logger.info("registration token %s (%s) created for organization %s", token.id, token_type.value, organization_id)
        return token

    def list_tokens(self, organization_id: str) -> Sequence[RegistrationToken]:
        return self._tokens.list_active(organization_id)

    def _owned(self, organization_id: str, token_id: str) -> RegistrationToken:
        token = self._tokens.get_by_id(token_id)
        if not token or token.organization_id != organization_id:
            raise NotFoundError("Token not found")
        return token

    def update_token(self, organization_id: str, token_id: str, updates: Dict[str, Any]) -> RegistrationToken:
        """Only activation, usage limit and expiry can change after creation."""
        self._owned(organization_id, token_id)

        changes: Dict[str, Any] = {}
        if "is_active" in updates:
            if not isinstance(updates["is_active"], bool):
                raise ValidationError("is_active must be a boolean value")
            changes["is_active"] = updates["is_active"]
        if "usage_limit" in updates:
            changes["usage_limit"] = optional_int(updates["usage_limit"], "usage_limit")
        if "expires_at" in updates:
            raw = updates["expires_at"]
            try:
                changes["expires_at"] = parse_iso_datetime(raw) if raw else None
            except (TypeError, ValueError):
                raise ValidationError("expires_at must be an ISO-8601 timestamp")

        return self._tokens.update(token_id, changes)

    def delete_token(self, organization_id: str, token_id: str) -> None:
        self._owned(organization_id, token_id)
        self._tokens.delete(token_id)

    def validate(self, token: Any) -> RegistrationToken:
        data = self._tokens.get_by_token(normalize_token(token), active_only=True)
        if not data:
            raise NotFoundError("Invalid or expired token")
        if data.is_expired(self._clock()):
            raise ValidationError("Token has expired")
        if data.is_exhausted():
            raise ValidationError("Token usage limit reached")
        return data

    def increment_usage(self, token: Any) -> RegistrationToken:
        data = self._tokens.get_by_token(normalize_token(token))
        if not data:
            raise NotFoundError("Token not found")
        return self._tokens.increment_usage(data.id)

    def active_token(self, token: Any) -> RegistrationToken:
        """Token lookup for link/QR rendering: it only has to be active."""
        data = self._tokens.get_by_token(require_non_empty(token, "Token"), active_only=True)
        if not data:
            raise NotFoundError("Invalid or expired token")
        return data


class SignupService:
    """Use case: self-service registration, either via a token or by founding an organization."""

    def __init__(
        self,
        users: UserRepository,
        organizations: OrganizationRepository,
        departments: DepartmentRepository,
        roles: RoleRepository,
        token_service: TokenService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._organizations = organizations
        self._departments = departments
        self._roles = roles
        self._token_service = token_service
        self._clock = clock

    def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        token: Optional[str] = None,
        organization_name: Optional[str] = None,
    ) -> User:
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", 6)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        phone = optional_str(phone, "phone")
        organization_name = optional_str(organization_name, "organization_name")

        if not token and not organization_name:
            raise ValidationError("A registration token or an organization name is required")

        if self._users.get_by_email(email):
            raise ConflictError("User already exists with this email address")

        if token:
            token_data = self._token_service.validate(token)
            organization_id = token_data.organization_id
            role_id = token_data.role_id
            department_id = token_data.department_id
        else:
            organization_id, role_id, department_id = self._found_organization(organization_name)

        user = self._users.create_user(
            organization_id=organization_id,
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role_id=role_id,
            department_id=department_id,
        )

        if token:
            self._token_service.increment_usage(token)

        logger.info("user %s registered in organization %s", user.id, organization_id)
        return user

    def _found_organization(self, name: str) -> tuple[str, str, str]:
        slug = f"{slugify(name)}-{int(self._clock().timestamp() * 1000)}"
        org = self._organizations.create(name=name, slug=slug, active_modules=["guard"], subscription_tier="basic")
        department = self._departments.create(organization_id=org.id, name="Security Operations")
        role = self._roles.create(organization_id=org.id, name="Super Admin", permissions=dict(SUPER_ADMIN_PERMISSIONS))
        logger.info("organization %s created (%s)", org.id, slug)
        return org.id, role.id, department.id
