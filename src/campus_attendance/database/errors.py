from __future__ import annotations


class StorageError(Exception):
    """Raised by repositories when the database rejects or fails an operation."""


class DuplicateKeyError(StorageError):
    """A UNIQUE or PRIMARY KEY constraint rejected a write.

    ``key`` names the logical column that collided (``"email"`` or ``"user_id"``).
    """

    def __init__(self, key: str, message: str = ""):
        super().__init__(message or f"duplicate value for {key}")
        self.key = key
