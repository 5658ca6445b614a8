from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import TokenType
from .generators.access_code import AccessCodeGenerator
from .generators.base import TokenGenerator
from .generators.uuid_token import UUIDTokenGenerator


@dataclass
class TokenGeneratorFactory:
    """Factory Pattern: choose the generator for a token type."""

    access_code: TokenGenerator = field(default_factory=AccessCodeGenerator)
    fallback: TokenGenerator = field(default_factory=UUIDTokenGenerator)

    def for_type(self, token_type: TokenType) -> TokenGenerator:
        if token_type == TokenType.ACCESS_CODE:
            return self.access_code
        return self.fallback
