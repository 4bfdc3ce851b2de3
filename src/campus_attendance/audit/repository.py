from __future__ import annotations

from typing import Protocol

from .model import ActivityLogEntry


class ActivityLogRepository(Protocol):
    def append(self, entry: ActivityLogEntry) -> None:
        raise NotImplementedError
