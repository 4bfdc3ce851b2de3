from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import ActivityLogEntry
from .repository import ActivityLogRepository


class MySQLActivityLogRepository(ActivityLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: ActivityLogEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(user_id, action, details, ip_address, user_agent, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.user_id,
                    entry.action.value,
                    entry.details,
                    entry.ip_address[:64],
                    entry.user_agent[:255],
                    entry.created_at,
                ),
            )
