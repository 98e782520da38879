"""Unit tests for the refresh-session and tombstone repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from authapi.repositories import RefreshTokenRepository, RevokedTokenRepository
from authapi.services._shared.errors import ConflictError
from sqlalchemy.exc import IntegrityError

from tests.factories.refresh_token import ExpiredRefreshTokenFactory, RefreshTokenFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def refresh_repo(session) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


@pytest.fixture()
def revoked_repo(session) -> RevokedTokenRepository:
    return RevokedTokenRepository(session)


def _in(minutes: int) -> datetime:
    return datetime.now(UTC) + timedelta(minutes=minutes)


class TestRefreshTokenRepository:
    def test_create_and_find(self, refresh_repo, session):
        user = UserFactory()

        row = refresh_repo.create(user_id=user.id, hashed_token="h", jti="j1", expires_at=_in(5))
        session.commit()

        found = refresh_repo.find_by_jti("j1")
        assert found is not None
        assert found.id == row.id
        assert found.user_id == user.id

    def test_duplicate_jti_conflicts(self, refresh_repo):
        existing = RefreshTokenFactory(jti="same")

        with pytest.raises(ConflictError):
            refresh_repo.create(
                user_id=existing.user_id, hashed_token="h", jti="same", expires_at=_in(5)
            )

    def test_unknown_user_is_not_reported_as_conflict(self, refresh_repo):
        with pytest.raises(IntegrityError) as excinfo:
            refresh_repo.create(user_id=987654, hashed_token="h", jti="orphan", expires_at=_in(5))

        assert not isinstance(excinfo.value, ConflictError)
        assert refresh_repo.find_by_jti("orphan") is None

    def test_delete_by_jti_reports_single_winner(self, refresh_repo, session):
        RefreshTokenFactory(jti="once")

        assert refresh_repo.delete_by_jti("once") == 1
        assert refresh_repo.delete_by_jti("once") == 0
        session.commit()
        assert refresh_repo.find_by_jti("once") is None

    def test_delete_by_user_id_and_listing(self, refresh_repo):
        user = UserFactory()
        other = UserFactory()
        RefreshTokenFactory(user_id=user.id)
        RefreshTokenFactory(user_id=user.id)
        RefreshTokenFactory(user_id=other.id)

        assert len(refresh_repo.list_by_user_id(user.id)) == 2
        assert refresh_repo.delete_by_user_id(user.id) == 2
        assert refresh_repo.list_by_user_id(user.id) == []
        assert len(refresh_repo.list_by_user_id(other.id)) == 1

    def test_delete_expired(self, refresh_repo):
        ExpiredRefreshTokenFactory(jti="stale")
        RefreshTokenFactory(jti="live")

        assert refresh_repo.delete_expired(datetime.now(UTC)) == 1
        assert refresh_repo.find_by_jti("live") is not None


class TestRevokedTokenRepository:
    def test_create_and_is_revoked(self, revoked_repo):
        revoked_repo.create(user_id=1, jti="t1", expires_at=_in(5), reason="logout")

        assert revoked_repo.is_revoked("t1")
        assert not revoked_repo.is_revoked("t2")
        assert revoked_repo.find_by_jti("t1").reason == "logout"

    def test_duplicate_conflicts(self, revoked_repo):
        revoked_repo.create(user_id=1, jti="t1", expires_at=_in(5), reason=None)

        with pytest.raises(ConflictError):
            revoked_repo.create(user_id=1, jti="t1", expires_at=_in(5), reason=None)
        assert revoked_repo.is_revoked("t1")

    def test_tombstone_needs_no_user_row(self, revoked_repo, session):
        revoked_repo.create(user_id=424242, jti="orphan", expires_at=_in(5), reason=None)
        session.commit()

        assert revoked_repo.is_revoked("orphan")

    def test_delete_expired(self, revoked_repo):
        revoked_repo.create(user_id=1, jti="old", expires_at=_in(-1), reason=None)
        revoked_repo.create(user_id=1, jti="new", expires_at=_in(5), reason=None)

        assert revoked_repo.delete_expired(datetime.now(UTC)) == 1
        assert revoked_repo.is_revoked("new")
        assert not revoked_repo.is_revoked("old")

    def test_rejects_filters_outside_whitelist(self, revoked_repo):
        with pytest.raises(ValueError, match="reason"):
            revoked_repo.find_one(reason="logout")
