from fastapi.testclient import TestClient


class TestLinkAPI:
    """Test the JSON endpoints"""

    def test_create_links(self, client: TestClient):
        """Test shortening with all defaults"""
        payload = {"urls": [{"longURL": "example.com", "validity": "", "shortcode": ""}]}

        response = client.post("/api/v1/links", json=payload)
        assert response.status_code == 201

        [link] = response.json()["links"]
        assert link["longURL"] == "https://example.com"
        assert len(link["shortcode"]) == 6
        assert link["short_url"].endswith(f"/{link['shortcode']}")
        assert link["clicks"] == 0
        assert link["clickData"] == []

    def test_create_with_custom_code(self, client: TestClient):
        payload = {"urls": [
            {"longURL": "https://www.python.org", "validity": 120, "shortcode": "python1"},
            {"longURL": "github.com"},
        ]}

        response = client.post("/api/v1/links", json=payload)
        assert response.status_code == 201

        codes = [link["shortcode"] for link in response.json()["links"]]
        assert codes[0] == "python1"
        assert len(codes[1]) == 6

    def test_validation_errors(self, client: TestClient):
        """Test that per-field errors come back and nothing is stored"""
        payload = {"urls": [
            {"longURL": "not-a-valid-url", "validity": "10081", "shortcode": "ab"},
        ]}

        response = client.post("/api/v1/links", json=payload)
        assert response.status_code == 422

        errors = response.json()["detail"]["errors"]
        assert {(e["field"], e["kind"]) for e in errors} == {
            ("longURL", "invalid_url"),
            ("validity", "invalid_validity"),
            ("shortcode", "invalid_shortcode"),
        }
        assert client.get("/api/v1/stats").json()["total_links"] == 0

    def test_too_many_urls(self, client: TestClient):
        payload = {"urls": [{"longURL": f"site{i}.com"} for i in range(6)]}

        response = client.post("/api/v1/links", json=payload)
        assert response.status_code == 422
        assert response.json()["detail"]["errors"][0]["kind"] == "invalid_batch"

    def test_get_link(self, client: TestClient):
        client.post("/api/v1/links", json={"urls": [{"longURL": "example.com", "shortcode": "info1"}]})

        response = client.get("/api/v1/links/info1")
        assert response.status_code == 200
        assert response.json()["longURL"] == "https://example.com"

    def test_get_nonexistent_link(self, client: TestClient):
        response = client.get("/api/v1/links/nonexistent")
        assert response.status_code == 404

    def test_get_link_corrupt_table(self, client: TestClient, store):
        store._write_blob('{"abc123": {"shortcode": 5}}')

        response = client.get("/api/v1/links/abc123")
        assert response.status_code == 500
        assert response.json()["detail"] == "An error occurred while processing your request"

    def test_control_characters_in_url_rejected(self, client: TestClient):
        payload = {"urls": [{"longURL": "https://example.com/a\r\nSet-Cookie: x=1", "shortcode": "crlf1"}]}

        response = client.post("/api/v1/links", json=payload)
        assert response.status_code == 422
        assert response.json()["detail"]["errors"][0]["kind"] == "invalid_url"
        assert client.get("/api/v1/links/crlf1").status_code == 404

    def test_resolve_json(self, client: TestClient):
        client.post("/api/v1/links", json={"urls": [{"longURL": "example.com", "shortcode": "json1"}]})

        response = client.get("/api/v1/resolve/json1", headers={"referer": "https://ref.example"})
        assert response.status_code == 200
        assert response.json() == {
            "shortcode": "json1",
            "target_url": "https://example.com",
            "delay_seconds": 2,
            "clicks": 1,
        }

        click = client.get("/api/v1/links/json1").json()["clickData"][0]
        assert click["source"] == "https://ref.example"

    def test_resolve_expired(self, client: TestClient, clock):
        client.post("/api/v1/links", json={"urls": [{"longURL": "example.com", "validity": 1, "shortcode": "old01"}]})
        clock.advance(minutes=2)

        response = client.get("/api/v1/resolve/old01")
        assert response.status_code == 410
        assert client.get("/api/v1/links/old01").json()["clicks"] == 0

    def test_stats(self, client: TestClient):
        client.post("/api/v1/links", json={"urls": [
            {"longURL": "example.com", "shortcode": "stat1"},
            {"longURL": "example.org", "shortcode": "stat2"},
        ]})
        client.get("/stat1", follow_redirects=False)
        client.get("/stat1", follow_redirects=False)

        data = client.get("/api/v1/stats").json()
        assert data["total_links"] == 2
        assert data["total_clicks"] == 2
        assert data["active_links"] == 2
        assert data["expired_links"] == 0


class TestRedirectPage:
    """Test the HTML interstitial"""

    def test_redirect_page(self, client: TestClient):
        client.post("/api/v1/links", json={"urls": [{"longURL": "https://www.github.com/", "shortcode": "gh001"}]})

        response = client.get("/gh001", headers={"user-agent": "pytest-browser"}, follow_redirects=False)
        assert response.status_code == 200
        assert response.headers["refresh"] == "2; url=https://www.github.com/"
        assert "Redirecting" in response.text

        click = client.get("/api/v1/links/gh001").json()["clickData"][0]
        assert click["userAgent"] == "pytest-browser"
        assert click["source"] == "direct"
        assert click["location"] == "Unknown"

    def test_redirect_idn_url(self, client: TestClient):
        """Test that non-ASCII targets are sent as an ASCII Refresh header"""
        response = client.post("/api/v1/links", json={"urls": [{"longURL": "https://例え.jp/パス", "shortcode": "uni01"}]})
        assert response.status_code == 201

        response = client.get("/uni01", follow_redirects=False)
        assert response.status_code == 200

        refresh = response.headers["refresh"]
        assert refresh.isascii()
        assert refresh.startswith("2; url=https://xn--")
        assert refresh.endswith("/%E3%83%91%E3%82%B9")
        assert client.get("/api/v1/links/uni01").json()["clicks"] == 1

    def test_redirect_logs_after_page(self, client: TestClient, log_sink):
        client.post("/api/v1/links", json={"urls": [{"longURL": "example.com", "shortcode": "log01"}]})

        client.get("/log01", follow_redirects=False)

        assert log_sink.entries[-1].message == "Redirecting log01 to https://example.com (Click #1)"

    def test_redirect_nonexistent(self, client: TestClient):
        response = client.get("/nonexistent", follow_redirects=False)
        assert response.status_code == 404
        assert "does not exist" in response.text

    def test_redirect_expired(self, client: TestClient, clock):
        client.post("/api/v1/links", json={"urls": [{"longURL": "example.com", "validity": 1, "shortcode": "gone1"}]})
        clock.advance(minutes=1, seconds=1)

        response = client.get("/gone1", follow_redirects=False)
        assert response.status_code == 410
        assert "expired" in response.text


class TestServiceEndpoints:

    def test_root(self, client: TestClient):
        assert client.get("/").json()["docs"] == "/docs"

    def test_health(self, client: TestClient):
        assert client.get("/health").json()["status"] == "healthy"
