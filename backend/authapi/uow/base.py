"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class SupportsCommit(Protocol):
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class ReadOnlyViolationError(RuntimeError):
    """A write was attempted inside a read-only unit of work."""

    def __init__(self, what: str) -> None:
        super().__init__(f"Read-only unit of work: {what} blocked")


class UnitOfWork(ABC):
    """
    Transactional boundary of one use-case.

    Implementations expose ``users``, ``refresh_tokens`` and ``revoked_tokens``
    repositories bound to the same session, commit on success and roll back on
    error.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
