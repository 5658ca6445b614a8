from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

# Either a flat list of permission names or a mapping resource -> actions,
# where {"*": "*"} grants everything.
Permissions = Union[list, dict]


@dataclass(frozen=True)
class Role:
    """A named permission set scoped to one organization."""

    id: str
    organization_id: str
    name: str
    permissions: Permissions
    created_at: Optional[datetime] = None
