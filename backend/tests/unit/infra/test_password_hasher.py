"""Unit tests for the Werkzeug password hasher."""

from __future__ import annotations

import pytest
from authapi.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_and_verify(hasher):
    digest = hasher.hash("correct horse")

    assert digest != "correct horse"
    assert digest.startswith("pbkdf2:sha256:1000$")
    assert hasher.verify("correct horse", digest)
    assert not hasher.verify("wrong horse", digest)


def test_hashes_are_salted(hasher):
    assert hasher.hash("same") != hasher.hash("same")


def test_long_inputs_are_not_truncated(hasher):
    # JWTs are far longer than 72 bytes; every byte must count.
    base = "x" * 200
    digest = hasher.hash(base + "a")

    assert not hasher.verify(base + "b", digest)


def test_empty_inputs(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")
    assert hasher.verify("anything", "") is False
    assert hasher.verify("anything", "not-a-hash") is False
