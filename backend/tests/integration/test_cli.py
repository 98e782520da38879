"""Integration tests for the ``flask tokens`` command group."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from authapi.repositories import RevokedTokenRepository

from tests.factories.refresh_token import ExpiredRefreshTokenFactory, RefreshTokenFactory


def test_purge_expired(app, session):
    repo = RevokedTokenRepository(session)
    repo.create(user_id=1, jti="old", expires_at=datetime.now(UTC) - timedelta(days=1), reason=None)
    repo.create(user_id=1, jti="new", expires_at=datetime.now(UTC) + timedelta(days=1), reason=None)
    session.commit()
    ExpiredRefreshTokenFactory()
    RefreshTokenFactory()

    result = app.test_cli_runner().invoke(args=["tokens", "purge-expired"])

    assert result.exit_code == 0, result.output
    assert "revoked_tokens" in result.output
    assert "removed=   1" in result.output
    assert not repo.is_revoked("old")
    assert repo.is_revoked("new")
