from __future__ import annotations

import uuid
from typing import Callable

from .base import TokenGenerator


class UUIDTokenGenerator(TokenGenerator):
    """QR and invite tokens: a random UUID, collisions are not checked."""

    def generate(self, *, exists: Callable[[str], bool]) -> str:
        return str(uuid.uuid4())
