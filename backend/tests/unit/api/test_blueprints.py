"""Unit tests for blueprint mounting."""

from __future__ import annotations

import pytest
from authapi.api import join_prefix


@pytest.mark.parametrize(
    ("segments", "expected"),
    [
        (("/api", "v1", ""), "/api/v1"),
        (("/api/", "/v1/", "/auth"), "/api/v1/auth"),
        (("", "v1"), "/v1"),
    ],
)
def test_join_prefix(segments, expected):
    assert join_prefix(*segments) == expected


def test_routes_are_mounted_under_version(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}

    assert "/api/v1/health" in rules
    assert "/api/v1/auth/login" in rules
    assert "/api/v1/auth/me" in rules
