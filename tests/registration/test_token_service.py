from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from fakes import InMemoryTokens
from guard_system.core.constants import ACCESS_CODE_ALPHABET
from guard_system.core.enums import TokenType
from guard_system.core.exceptions import NotFoundError, ValidationError
from guard_system.registration.factory import TokenGeneratorFactory
from guard_system.registration.generators.access_code import AccessCodeGenerator
from guard_system.registration.generators.base import TokenGenerationError
from guard_system.registration.generators.uuid_token import UUIDTokenGenerator
from guard_system.registration.model import RegistrationToken
from guard_system.registration.service import TokenService, normalize_token

NOW = datetime(2024, 5, 1, 9, 0, 0)


def _service(tokens=None) -> TokenService:
    return TokenService(tokens or InMemoryTokens(), clock=lambda: NOW)


def _token(**kw) -> RegistrationToken:
    base = dict(id="t1", organization_id="org-1", token="ABC12", token_type=TokenType.ACCESS_CODE)
    base.update(kw)
    return RegistrationToken(**base)


def test_factory_picks_generator_by_type():
    factory = TokenGeneratorFactory()
    assert isinstance(factory.for_type(TokenType.ACCESS_CODE), AccessCodeGenerator)
    assert isinstance(factory.for_type(TokenType.QR), UUIDTokenGenerator)
    assert isinstance(factory.for_type(TokenType.INVITE), UUIDTokenGenerator)


def test_access_code_shape():
    code = AccessCodeGenerator().generate(exists=lambda _: False)
    assert len(code) == 5
    assert set(code) <= set(ACCESS_CODE_ALPHABET)
    assert "O" not in code and "0" not in code


def test_access_code_retries_until_unique():
    taken = iter([True, True, False])
    code = AccessCodeGenerator().generate(exists=lambda _: next(taken))
    assert len(code) == 5


def test_access_code_gives_up_after_max_attempts():
    with pytest.raises(TokenGenerationError, match="Unable to generate unique access code"):
        AccessCodeGenerator(max_attempts=3).generate(exists=lambda _: True)


def test_create_token_sets_expiry_from_hours():
    token = _service().create_token(
        "org-1", created_by="admin", token_type="access_code", expires_in_hours=48, usage_limit="3"
    )
    assert token.expires_at == NOW + timedelta(hours=48)
    assert token.usage_limit == 3
    assert token.usage_count == 0
    assert token.is_active


def test_create_token_rejects_unknown_type():
    with pytest.raises(ValidationError):
        _service().create_token("org-1", created_by="admin", token_type="magic")


def test_validate_accepts_lowercase_short_code():
    tokens = InMemoryTokens([_token()])
    assert _service(tokens).validate("abc12").id == "t1"


def test_long_tokens_are_not_uppercased():
    assert normalize_token("0f8fad5b-d9cb-469f-a165-70867728950e") == "0f8fad5b-d9cb-469f-a165-70867728950e"


@pytest.mark.parametrize(
    "token, error, message",
    [
        (_token(is_active=False), NotFoundError, "Invalid or expired token"),
        (_token(expires_at=NOW - timedelta(seconds=1)), ValidationError, "Token has expired"),
        (_token(usage_limit=2, usage_count=2), ValidationError, "Token usage limit reached"),
    ],
)
def test_validate_rejections(token, error, message):
    with pytest.raises(error, match=message):
        _service(InMemoryTokens([token])).validate("ABC12")


def test_unlimited_token_is_never_exhausted():
    assert not _token(usage_limit=None, usage_count=500).is_exhausted()


def test_increment_usage():
    tokens = InMemoryTokens([_token(usage_count=1)])
    assert _service(tokens).increment_usage("abc12").usage_count == 2


def test_update_token_only_touches_whitelisted_fields():
    tokens = InMemoryTokens([_token()])
    updated = _service(tokens).update_token(
        "org-1", "t1", {"is_active": False, "usage_limit": 10, "token": "HACKED", "organization_id": "org-2"}
    )
    assert updated.is_active is False
    assert updated.usage_limit == 10
    assert updated.token == "ABC12"
    assert updated.organization_id == "org-1"


def test_other_tenants_tokens_are_invisible():
    tokens = InMemoryTokens([_token()])
    with pytest.raises(NotFoundError, match="Token not found"):
        _service(tokens).delete_token("org-2", "t1")
    assert "t1" in tokens.tokens
