from __future__ import annotations

from typing import Optional


def resolve_base_url(configured: Optional[str], host: Optional[str], forwarded_proto: Optional[str]) -> str:
    """Public base URL for links printed into QR codes.

    A configured URL wins unless it points at localhost; otherwise the link is
    rebuilt from the request host and the proxy's protocol header.
    """
    if configured and "localhost" not in configured:
        return configured.rstrip("/")

    host = host or "localhost:5000"
    protocol = forwarded_proto or ("http" if "localhost" in host else "https")
    return f"{protocol}://{host}"


def registration_url(base_url: str, token: str) -> str:
    return f"{base_url}/register?token={token}"


def scan_url(base_url: str, code: str) -> str:
    return f"{base_url}/attendance/scan?code={code}"
