"""Tests for Content-Type charset resolution."""

import pytest

from freshfetch.web.charset import resolve_charset


@pytest.mark.parametrize(
    "content_type,expected",
    [
        ("text/plain; charset=ISO-8859-1", "iso8859-1"),
        ("text/html; charset=\"windows-1252\"", "cp1252"),
        ("text/csv;CHARSET=utf-8", "utf-8"),
        ("application/json; charset='latin1'; q=1", "iso8859-1"),
    ],
)
def test_declared_charset(content_type, expected):
    assert resolve_charset(content_type) == expected


@pytest.mark.parametrize("content_type", [None, "", "text/plain", "text/plain; charset=klingon-8"])
def test_falls_back_to_default(content_type):
    assert resolve_charset(content_type, default="utf-8") == "utf-8"
    assert resolve_charset(content_type, default="cp1252") == "cp1252"
