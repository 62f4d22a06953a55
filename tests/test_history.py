"""Tests for the in-memory scan history and the duplicate-scan throttle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from safeqr.history import DateFilter, ScanHistory, ScanThrottle
from safeqr.qr_scanner.qr_utils import parse_scan


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def history() -> ScanHistory:
    h = ScanHistory()
    h.add(parse_scan("https://example.com/old"), created_at=NOW - timedelta(days=20))
    h.add(parse_scan("jane@example.com"), symbology="qr", created_at=NOW - timedelta(days=3))
    h.add(parse_scan("WIFI:S:Cafe;;"), created_at=NOW - timedelta(hours=2))
    h.add(parse_scan("https://Example.com/new"), created_at=NOW - timedelta(minutes=5))
    return h


def test_records_are_newest_first(history):
    raws = [r.raw_value for r in history.list()]
    assert raws == [
        "https://Example.com/new",
        "WIFI:S:Cafe;;",
        "jane@example.com",
        "https://example.com/old",
    ]


def test_record_shape(history):
    record = history.list()[2]
    assert record.kind == "email"
    assert record.symbology == "qr"
    assert record.is_favorite is False
    data = record.to_dict()
    assert set(data) == {"id", "raw_value", "kind", "symbology", "created_at", "is_favorite"}


def test_kind_options_sorted(history):
    assert history.kind_options() == ["email", "url", "wifi"]


def test_filter_by_kind(history):
    assert [r.kind for r in history.filter(kind="url")] == ["url", "url"]


def test_unknown_kind_filters_nothing(history):
    assert len(history.filter(kind="geo")) == 4


@pytest.mark.parametrize("date_filter, expected", [
    (DateFilter.ALL, 4),
    (DateFilter.DAY, 2),
    (DateFilter.WEEK, 3),
    (DateFilter.MONTH, 4),
])
def test_filter_by_date(history, date_filter, expected):
    assert len(history.filter(date_filter=date_filter, now=NOW)) == expected


def test_search_is_case_insensitive(history):
    assert len(history.filter(query="  EXAMPLE.com ")) == 3


def test_favorites(history):
    target = history.list()[1]
    assert history.toggle_favorite(target.id).is_favorite is True
    assert [r.id for r in history.filter(favorites_only=True)] == [target.id]
    assert history.toggle_favorite(target.id).is_favorite is False


def test_toggle_unknown_id_raises(history):
    with pytest.raises(KeyError):
        history.toggle_favorite("missing")


def test_delete_and_clear(history):
    ids = [r.id for r in history.list()[:2]]
    assert history.delete(ids + ["missing"]) == 2
    assert len(history) == 2
    assert history.clear() == 2
    assert history.list() == []


def test_export_joins_raw_values(history):
    ids = [r.id for r in history.filter(kind="url")]
    assert history.export_text(ids) == "https://Example.com/new\nhttps://example.com/old"


def test_capacity_drops_oldest():
    h = ScanHistory(max_records=2)
    for n in range(3):
        h.add(parse_scan(f"note {n}"), created_at=NOW + timedelta(seconds=n))
    assert [r.raw_value for r in h.list()] == ["note 2", "note 1"]


def test_limit(history):
    assert len(history.list(limit=1)) == 1


def test_negative_limit_is_empty(history):
    assert history.list(limit=-1) == []
    assert history.list(limit=0) == []


# ---- Throttle ----

def test_throttle_drops_repeat_within_window():
    throttle = ScanThrottle(window_seconds=3.0)
    assert throttle.should_accept("https://example.com", now=100.0)
    assert not throttle.should_accept(" https://example.com\n", now=102.9)
    assert throttle.should_accept("https://example.com", now=103.0)


def test_throttle_accepts_different_value():
    throttle = ScanThrottle()
    assert throttle.should_accept("a", now=0.0)
    assert throttle.should_accept("b", now=0.1)
    assert throttle.should_accept("a", now=0.2)


def test_throttle_rejects_blank():
    assert not ScanThrottle().should_accept("   ")


def test_throttle_reset():
    throttle = ScanThrottle()
    assert throttle.should_accept("a", now=0.0)
    throttle.reset()
    assert throttle.should_accept("a", now=0.1)
