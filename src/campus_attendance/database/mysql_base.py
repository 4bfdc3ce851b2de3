from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Dict, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection
from .errors import DuplicateKeyError, StorageError

_DUP_KEY_RE = re.compile(r"for key '(?:[\w]+\.)?([\w]+)'")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction.

    Commits when the block finishes, rolls back on any exception. Driver
    errors are re-raised as ``StorageError`` (``DuplicateKeyError`` for 1062).
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StorageError(f"connection failed: {exc}") from exc
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateKeyError(duplicate_key_column(exc.msg), str(exc)) from exc
        raise StorageError(str(exc)) from exc
    except mysql.connector.Error as exc:
        conn.rollback()
        raise StorageError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def duplicate_key_column(message: str) -> str:
    """Map a MySQL 1062 message to the logical column that collided.

    ``Duplicate entry 'a@b.c' for key 'users.uq_users_email'`` -> ``"email"``;
    the users primary key (or a profile primary key) -> ``"user_id"``.
    """
    match = _DUP_KEY_RE.search(message or "")
    index = match.group(1).lower() if match else ""
    if "email" in index:
        return "email"
    return "user_id"


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None
