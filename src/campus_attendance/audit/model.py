from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import UNKNOWN_CLIENT
from ..core.enums import AuditAction


@dataclass(frozen=True)
class ClientInfo:
    """Where a request came from, as far as the transport tells us."""

    ip_address: str = UNKNOWN_CLIENT
    user_agent: str = UNKNOWN_CLIENT


@dataclass(frozen=True)
class ActivityLogEntry:
    """Append-only audit record. Never updated or deleted."""

    user_id: Optional[int]
    action: AuditAction
    details: str
    ip_address: str
    user_agent: str
    created_at: datetime
