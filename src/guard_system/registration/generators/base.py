from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from ...core.exceptions import DomainError


class TokenGenerationError(DomainError):
    """No unique token value could be produced."""

    status_code = 500


class TokenGenerator(ABC):
    """Strategy Pattern: encapsulate how a token value is produced for one token type."""

    @abstractmethod
    def generate(self, *, exists: Callable[[str], bool]) -> str:
        """Return a fresh token value; `exists` reports whether a value is already taken."""
        raise NotImplementedError
