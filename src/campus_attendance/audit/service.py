from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.enums import AuditAction
from .model import ActivityLogEntry, ClientInfo
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityAuditor:
    """Best-effort security event log.

    ``log`` never raises: a failed write is reported to the server log and the
    operation being audited carries on.
    """

    def __init__(self, repo: ActivityLogRepository, *, clock: Callable[[], datetime] = now_local):
        self._repo = repo
        self._clock = clock

    def log(
        self,
        user_id: Optional[int],
        action: AuditAction,
        details: str = "",
        *,
        client: Optional[ClientInfo] = None,
    ) -> bool:
        client = client or ClientInfo()
        try:
            self._repo.append(
                ActivityLogEntry(
                    user_id=user_id,
                    action=action,
                    details=details,
                    ip_address=client.ip_address,
                    user_agent=client.user_agent,
                    created_at=self._clock(),
                )
            )
            return True
        except Exception:
            logger.exception("Activity logging failed (user_id=%s, action=%s)", user_id, action.value)
            return False
