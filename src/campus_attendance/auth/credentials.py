from __future__ import annotations

import string

from werkzeug.security import check_password_hash, generate_password_hash

from ..core.constants import MIN_PASSWORD_LENGTH, MIN_PASSWORD_STRENGTH, PASSWORD_SPECIAL_CHARACTERS
from ..core.enums import ErrorKind
from ..core.exceptions import ValidationError

DEFAULT_HASH_METHOD = "scrypt"


class CredentialStore:
    """One-way password hashing, verification and strength scoring.

    Hashing is delegated to werkzeug (salted, adaptive); verification goes
    through the same primitive, which compares digests in constant time.
    """

    def __init__(self, *, method: str = DEFAULT_HASH_METHOD, min_strength: int = MIN_PASSWORD_STRENGTH):
        self._method = method
        self._min_strength = min_strength
        self._dummy_hash = generate_password_hash("dummy-password-for-timing", method=method)

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password cannot be empty")
        return generate_password_hash(password, method=self._method)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return check_password_hash(password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False

    def verify_dummy(self, password: str) -> bool:
        """Burn one verification so unknown emails cost as much as wrong passwords."""
        self.verify(password or "x", self._dummy_hash)
        return False

    @staticmethod
    def strength(password: str) -> int:
        """Score 0..5: one point each for length, upper, lower, digit and special character."""
        if not password:
            return 0
        checks = (
            len(password) >= MIN_PASSWORD_LENGTH,
            any(ch in string.ascii_uppercase for ch in password),
            any(ch in string.ascii_lowercase for ch in password),
            any(ch in string.digits for ch in password),
            any(ch in PASSWORD_SPECIAL_CHARACTERS for ch in password),
        )
        return sum(checks)

    def require_strong(self, password: str) -> str:
        if self.strength(password) < self._min_strength:
            raise ValidationError(
                "Password is too weak. Please include uppercase, lowercase, numbers, and special characters.",
                kind=ErrorKind.WEAK_PASSWORD,
            )
        return password
