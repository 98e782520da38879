from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    One-way password hashing.

    ``hash`` output is opaque; ``verify`` returns ``False`` (never raises) for
    a mismatch or an unparseable digest.
    """

    def hash(self, raw: str) -> str: ...
    def verify(self, raw: str, hashed: str) -> bool: ...
