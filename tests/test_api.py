"""HTTP API tests."""

from __future__ import annotations


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert len(resp.headers["X-Request-ID"]) == 16


def test_scan_url_and_history(client):
    resp = client.post("/scan", json={"content": "http://192.168.1.1/admin", "symbology": "org.iso.QRCode"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["kind"] == "url"
    assert body["risk"]["level"] == "high"
    assert body["history_id"]

    history = client.get("/scan-history").json()
    assert history["kinds"] == ["url"]
    assert history["records"][0]["raw_value"] == "http://192.168.1.1/admin"
    assert history["records"][0]["symbology"] == "org.iso.QRCode"


def test_scan_respects_aggressive_flag(client):
    resp = client.post("/scan", json={"content": "http://login.example.tk/", "aggressive": False})
    assert resp.json()["risk"]["flags"] == ["Not HTTPS"]


def test_duplicate_scan_is_rejected(client):
    assert client.post("/scan", json={"content": "hello there"}).status_code == 200
    resp = client.post("/scan", json={"content": " hello there "})
    assert resp.status_code == 409
    assert resp.json()["duplicate"] is True
    assert len(client.get("/scan-history").json()["records"]) == 1


def test_blank_scan_is_rejected(client):
    resp = client.post("/scan", json={"content": "  \n "})
    assert resp.status_code == 400


def test_oversized_scan_is_rejected(client):
    resp = client.post("/scan", json={"content": "x" * 10001})
    assert resp.status_code == 413


def test_invalid_body_is_422(client):
    resp = client.post("/scan", json={"nope": 1})
    assert resp.status_code == 422
    assert resp.json()["error"] == "Invalid request."


def test_analyze_url(client):
    resp = client.post("/analyze-url", json={"url": "https://bit.ly/abc", "aggressive": False})
    assert resp.status_code == 200
    assert resp.json()["flags"] == ["Link shortener"]
    assert resp.json()["level"] == "low"


def test_analyze_url_uses_raw_for_length(client):
    resp = client.post(
        "/analyze-url",
        json={"url": "https://example.com/", "raw": "y" * 150, "aggressive": False},
    )
    assert resp.json()["flags"] == ["Very long URL"]


def test_wifi_endpoint(client):
    ok = client.post("/wifi", json={"content": "WIFI:T:nopass;S:Cafe;;"}).json()
    assert ok["join_available"] is True
    assert ok["wifi"]["is_open"] is True
    assert ok["wifi"]["passphrase"] is None

    bad = client.post("/wifi", json={"content": "not-a-valid-wifi-string"}).json()
    assert bad == {"wifi": None, "join_available": False}


def test_sanitize_endpoint(client):
    body = client.post("/sanitize", json={"url": "https://example.com/?a=1&utm_source=x&b=2&fbclid=y"}).json()
    assert body["sanitized"] == "https://example.com/?a=1&b=2"
    assert body["changed"] is True


def test_history_favorite_export_delete(client):
    ids = []
    for payload in ("first note", "https://example.com/a", "tel:+15551234567"):
        ids.append(client.post("/scan", json={"content": payload}).json()["history_id"])

    fav = client.post(f"/scan-history/{ids[1]}/favorite")
    assert fav.json()["is_favorite"] is True
    favorites = client.get("/scan-history", params={"favorites_only": True}).json()["records"]
    assert [r["id"] for r in favorites] == [ids[1]]

    phones = client.get("/scan-history", params={"kind": "phone"}).json()["records"]
    assert [r["raw_value"] for r in phones] == ["tel:+15551234567"]

    found = client.get("/scan-history", params={"q": "NOTE", "date_filter": "day"}).json()["records"]
    assert [r["raw_value"] for r in found] == ["first note"]

    text = client.post("/scan-history/export", json={"ids": [ids[0], ids[2]]}).json()["text"]
    assert text == "tel:+15551234567\nfirst note"

    assert client.post("/scan-history/delete", json={"ids": [ids[0]]}).json() == {"deleted": 1}
    assert client.post("/scan-history/delete", json={"all": True}).json() == {"deleted": 2}


def test_favorite_unknown_id_is_404(client):
    resp = client.post("/scan-history/does-not-exist/favorite")
    assert resp.status_code == 404


def test_scan_parses_payload_once(client, monkeypatch):
    from safeqr.qr_scanner import qr_engine

    calls = []
    real = qr_engine.parse_scan

    def counting(raw):
        calls.append(raw)
        return real(raw)

    monkeypatch.setattr(qr_engine, "parse_scan", counting)
    resp = client.post("/scan", json={"content": "geo:37.78,-122.4"})
    assert resp.status_code == 200
    assert len(calls) == 1
    assert client.get("/scan-history").json()["records"][0]["kind"] == "geo"
