from conftest import EXAMPLE_LINE, make_line


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["name"] == "LogScope API"


class TestAnalyzeEndpoint:
    def test_upload_parses_entries(self, client, mixed_text):
        resp = client.post(
            "/api/analyze",
            files={"file": ("app.log", mixed_text.encode("utf-8"), "text/plain")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["label"] == "app.log"
        assert data["num_entries"] == 4
        assert data["skipped"] == 1
        assert data["level_counts"] == {"info": 2, "error": 1, "warn": 1}
        assert data["metadata_options"]["table"] == ["orders", "users"]
        assert [c["name"] for c in data["columns"]][-3:] == ["meta_port", "meta_table", "meta_code"]

    def test_entry_shape(self, client):
        resp = client.post(
            "/api/analyze",
            files={"file": ("one.log", EXAMPLE_LINE.encode("utf-8"), "text/plain")},
        )
        entry = resp.json()["entries"][0]
        assert entry["id"] == "2024-04-12T05:41:11.337Z-0"
        assert entry["timestamp"] == "2024-04-12T05:41:11.337000+00:00"
        assert entry["timestamp_ms"] == 1712900471337
        assert entry["source_line"] == 71
        assert entry["metadata"] == {"status": "ok", "latency_ms": "212"}

    def test_utf8_bom_accepted(self, client):
        resp = client.post(
            "/api/analyze",
            files={"file": ("bom.log", b"\xef\xbb\xbf" + make_line("hi").encode("utf-8"), "text/plain")},
        )
        assert resp.status_code == 200
        assert resp.json()["num_entries"] == 1

    def test_empty_file_rejected(self, client):
        resp = client.post("/api/analyze", files={"file": ("empty.log", b"", "text/plain")})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Empty file"

    def test_non_utf8_rejected(self, client):
        resp = client.post("/api/analyze", files={"file": ("bad.log", b"\xff\xfa\x00", "text/plain")})
        assert resp.status_code == 400
        assert "not UTF-8" in resp.json()["detail"]

    def test_oversize_rejected(self, client, monkeypatch):
        from logscope.core.config import settings
        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        resp = client.post(
            "/api/analyze",
            files={"file": ("big.log", make_line("hi").encode("utf-8"), "text/plain")},
        )
        assert resp.status_code == 413


class TestSampleEndpoint:
    def test_sample_dataset(self, client):
        resp = client.get("/api/sample")
        assert resp.status_code == 200
        data = resp.json()
        assert data["label"] == "sample"
        assert data["num_entries"] == 22
        assert data["skipped"] == 2
        assert data["level_counts"] == {"info": 14, "debug": 3, "warn": 3, "error": 2}


class TestExploreEndpoint:
    def test_level_filter_and_sort(self, client, mixed_text):
        resp = client.post("/api/explore", json={
            "text": mixed_text,
            "filters": {"levels": ["ERROR", "warn"]},
            "sort_direction": "asc",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_count"] == 4
        assert data["displayed_count"] == 2
        assert data["filtered"] is True
        assert [e["message"] for e in data["entries"]] == ["slow query", "query failed"]
        assert len(data["rows"]) == 2

    def test_hotspots_with_default_threshold(self, client, mixed_text):
        resp = client.post("/api/explore", json={"text": mixed_text})
        data = resp.json()
        assert data["gap_threshold_seconds"] == 5.0
        assert [h["gap_ms"] for h in data["hotspots"]] == [5000, 5000]
        assert data["hotspots"][0]["gap_label"] == "5.0s"

    def test_threshold_clamped(self, client, mixed_text):
        resp = client.post("/api/explore", json={"text": mixed_text, "gap_threshold_seconds": 99999})
        data = resp.json()
        assert data["gap_threshold_seconds"] == 3600.0
        assert data["hotspots"] == []

    def test_invalid_sort_direction(self, client, mixed_text):
        resp = client.post("/api/explore", json={"text": mixed_text, "sort_direction": "up"})
        assert resp.status_code == 422


class TestQueryEndpoint:
    def test_query_rows(self, client, mixed_text):
        resp = client.post("/api/query", json={
            "text": mixed_text,
            "sql": "SELECT meta_table AS t, COUNT(*) AS n FROM logs WHERE meta_table IS NOT NULL "
                   "GROUP BY meta_table ORDER BY t",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["columns"] == ["t", "n"]
        assert data["rows"] == [{"t": "orders", "n": 1}, {"t": "users", "n": 1}]
        assert data["row_count"] == 2

    def test_query_respects_filters(self, client, mixed_text):
        resp = client.post("/api/query", json={
            "text": mixed_text,
            "sql": "SELECT COUNT(*) AS n FROM logs",
            "filters": {"sources": ["api/db.py"]},
        })
        assert resp.json()["rows"] == [{"n": 2}]

    def test_bad_sql(self, client, mixed_text):
        resp = client.post("/api/query", json={"text": mixed_text, "sql": "SELEC"})
        assert resp.status_code == 400
        assert resp.json()["detail"]

    def test_sample_queries_listed(self, client):
        resp = client.get("/api/queries")
        assert resp.status_code == 200
        assert len(resp.json()) == 3
