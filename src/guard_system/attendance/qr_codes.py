from __future__ import annotations

import secrets
from datetime import datetime
from typing import Optional

from ..core.enums import QRCodeType

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_code(qr_type: QRCodeType, site_id: Optional[str], now: datetime) -> str:
    """`STC|RND-<site prefix or GENERAL>-<base36 millis>-<16 hex>`, upper-cased."""
    prefix = "STC" if qr_type == QRCodeType.STATIC else "RND"
    site_prefix = site_id[:8] if site_id else "GENERAL"
    stamp = to_base36(int(now.timestamp() * 1000))
    return f"{prefix}-{site_prefix}-{stamp}-{secrets.token_hex(8)}".upper()
