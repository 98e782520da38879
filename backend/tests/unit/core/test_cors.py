"""Unit tests for CORS origin parsing."""

from __future__ import annotations

import pytest
from authapi.core.cors import parse_origins


@pytest.mark.parametrize("raw", [None, "", "  ", "*", " * "])
def test_wildcard_origins(raw):
    assert parse_origins(raw) is None


def test_explicit_origins_are_trimmed():
    assert parse_origins("http://a.test, http://b.test ,") == ["http://a.test", "http://b.test"]
