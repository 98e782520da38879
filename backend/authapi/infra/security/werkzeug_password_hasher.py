"""Password hashing backed by :mod:`werkzeug.security`."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


class WerkzeugPasswordHasher:
    """
    Salted password hashes in Werkzeug's ``method$salt$hash`` format.

    :param method: Werkzeug hashing method (``scrypt`` by default).
    """

    def __init__(self, method: str = "scrypt") -> None:
        self.method = method

    def hash(self, raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(raw, method=self.method)

    def verify(self, raw: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
            return bool(check_password_hash(hashed, raw))
        except ValueError:
            return False
