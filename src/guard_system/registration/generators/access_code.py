from __future__ import annotations

import secrets
from typing import Callable

from ...core.constants import ACCESS_CODE_ALPHABET, ACCESS_CODE_LENGTH, ACCESS_CODE_MAX_ATTEMPTS
from .base import TokenGenerationError, TokenGenerator


class AccessCodeGenerator(TokenGenerator):
    """Short human-typable codes, retried until one is not taken."""

    def __init__(
        self,
        *,
        alphabet: str = ACCESS_CODE_ALPHABET,
        length: int = ACCESS_CODE_LENGTH,
        max_attempts: int = ACCESS_CODE_MAX_ATTEMPTS,
    ):
        self._alphabet = alphabet
        self._length = length
        self._max_attempts = max_attempts

    def random_code(self) -> str:
        return "".join(secrets.choice(self._alphabet) for _ in range(self._length))

    def generate(self, *, exists: Callable[[str], bool]) -> str:
        for _ in range(self._max_attempts):
            code = self.random_code()
            if not exists(code):
                return code
        raise TokenGenerationError("Unable to generate unique access code")
