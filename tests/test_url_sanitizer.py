"""Tests for tracking-parameter removal."""

from __future__ import annotations

import pytest

from safeqr.url_sanitizer import is_tracking_param, sanitize_url


def test_removes_only_tracking_params():
    url = "https://example.com/p?a=1&utm_source=x&b=2&fbclid=y"
    assert sanitize_url(url) == "https://example.com/p?a=1&b=2"


def test_query_dropped_when_everything_is_tracking():
    url = "https://example.com/p?utm_source=x&utm_medium=y&gclid=z"
    assert sanitize_url(url) == "https://example.com/p"


def test_fragment_and_port_preserved():
    url = "https://example.com:8443/a/b?utm_campaign=spring&id=7#section?x=1"
    assert sanitize_url(url) == "https://example.com:8443/a/b?id=7#section?x=1"


def test_fragment_kept_when_query_removed():
    assert sanitize_url("https://example.com/?fbclid=abc#top") == "https://example.com/#top"


def test_no_query_is_unchanged():
    url = "https://example.com/path#frag"
    assert sanitize_url(url) == url


def test_empty_query_is_unchanged():
    assert sanitize_url("https://example.com/?") == "https://example.com/?"


def test_names_are_case_insensitive():
    url = "https://example.com/?UTM_Source=x&MsClkId=1&keep=Y"
    assert sanitize_url(url) == "https://example.com/?keep=Y"


def test_encoding_of_kept_params_is_untouched():
    url = "https://example.com/?q=caf%C3%A9+au+lait&utm_term=x&empty=&flag"
    assert sanitize_url(url) == "https://example.com/?q=caf%C3%A9+au+lait&empty=&flag"


def test_similar_names_are_kept():
    url = "https://example.com/?utm=1&xfbclid=2&gclid_extra=3"
    assert sanitize_url(url) == url


def test_malformed_url_is_returned_unchanged():
    url = "http://[::1?utm_source=x"
    assert sanitize_url(url) == url


@pytest.mark.parametrize("name", ["utm_source", "utm_", "fbclid", "gclid", "dclid", "igshid", "msclkid", "mc_cid", "mc_eid", "utm%5Fsource"])
def test_is_tracking_param(name):
    assert is_tracking_param(name)


def test_sanitize_is_stable():
    once = sanitize_url("https://example.com/?a=1&utm_source=x")
    assert sanitize_url(once) == once
