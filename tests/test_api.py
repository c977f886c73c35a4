"""End-to-end tests for the HTTP API."""

import re
from datetime import datetime
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from rejector.app.main import create_app
from rejector.app.runtime import RejectionRuntime
from rejector.app.services.messages import REJECTION_REASONS

REJECTION_PATH = "/api/v1/rejection"
HEALTH_PATH = "/api/v1/health"
BROWSER_UA = {"User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/120.0"}


@pytest.fixture
def build_client(make_settings):
    """Build a started test client; returns (client, runtime)."""
    clients = []

    def _build(**overrides):
        runtime = RejectionRuntime(make_settings(**overrides))
        client = TestClient(create_app(runtime.settings, runtime), headers=BROWSER_UA)
        client.__enter__()
        clients.append(client)
        return client, runtime

    yield _build

    for client in clients:
        client.__exit__(None, None, None)


class TestRejectionEndpoint:
    """Tests for GET /api/v1/rejection."""

    def test_returns_rejection(self, build_client):
        client, _ = build_client()

        response = client.get(REJECTION_PATH)

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"id", "reason", "timestamp", "requestId"}
        assert body["id"] == 1
        assert body["reason"] in REJECTION_REASONS
        assert re.match(r"^[0-9a-f]{8}$", body["requestId"])
        datetime.strptime(body["timestamp"], "%Y-%m-%dT%H:%M:%SZ")

    def test_response_headers(self, build_client):
        client, _ = build_client()

        response = client.get(REJECTION_PATH)

        assert response.headers["X-Request-ID"] == response.json()["requestId"]
        assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "max-age=31536000" in response.headers["Strict-Transport-Security"]
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "99"

    def test_ids_are_sequential_and_request_ids_unique(self, build_client):
        client, _ = build_client()

        bodies = [client.get(REJECTION_PATH).json() for _ in range(5)]

        assert [b["id"] for b in bodies] == [1, 2, 3, 4, 5]
        assert len({b["requestId"] for b in bodies}) == 5

    def test_cors_allows_any_origin(self, build_client):
        client, _ = build_client()

        response = client.get(REJECTION_PATH, headers={"Origin": "https://example.org"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_unexpected_error_returns_500(self, make_settings):
        runtime = RejectionRuntime(make_settings())
        app = create_app(runtime.settings, runtime)

        with TestClient(app, headers=BROWSER_UA, raise_server_exceptions=False) as client:
            with patch.object(
                runtime.service, "get_random_rejection", side_effect=RuntimeError("secret detail")
            ):
                response = client.get(REJECTION_PATH)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert "secret detail" not in body["message"]
        assert "requestId" in body


class TestRateLimiting:
    """Tests for per-IP rate limiting through the API."""

    def test_exhausted_client_gets_429(self, build_client):
        client, runtime = build_client(rate_limit_capacity=2)
        client.get(REJECTION_PATH)
        client.get(REJECTION_PATH)

        response = client.get(REJECTION_PATH)

        assert response.status_code == 429
        assert response.json() == {
            "error": "Rate limit exceeded",
            "message": "Too many requests. Try again later.",
        }
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert "X-Request-ID" in response.headers
        # Throttled requests never reach the service
        assert runtime.counter.snapshot().total == 2

    def test_forwarded_clients_are_limited_separately(self, build_client):
        client, _ = build_client(rate_limit_capacity=1)

        first = client.get(REJECTION_PATH, headers={"X-Forwarded-For": "203.0.113.1"})
        second = client.get(REJECTION_PATH, headers={"X-Forwarded-For": "203.0.113.2"})
        again = client.get(REJECTION_PATH, headers={"X-Forwarded-For": "203.0.113.1, 10.0.0.1"})

        assert (first.status_code, second.status_code, again.status_code) == (200, 200, 429)

    def test_health_has_separate_pool_by_default(self, build_client):
        client, _ = build_client(rate_limit_capacity=1)
        client.get(REJECTION_PATH)
        assert client.get(REJECTION_PATH).status_code == 429

        assert client.get(HEALTH_PATH).status_code == 200

    def test_shared_mode_counts_health_against_fetch_pool(self, build_client):
        client, _ = build_client(rate_limit_capacity=1, health_rate_limit_mode="shared")
        client.get(REJECTION_PATH)

        assert client.get(HEALTH_PATH).status_code == 429

    def test_bypass_mode_never_limits_health(self, build_client):
        client, _ = build_client(rate_limit_capacity=1, health_rate_limit_mode="bypass")

        responses = [client.get(HEALTH_PATH) for _ in range(5)]

        assert all(r.status_code == 200 for r in responses)
        assert "X-RateLimit-Limit" not in responses[0].headers


class TestRequestFiltering:
    """Tests for malformed and suspicious request rejection."""

    def test_post_is_rejected(self, build_client):
        client, runtime = build_client()

        response = client.post(REJECTION_PATH)

        assert response.status_code == 400
        assert response.json()["error"] == "Bad Request"
        assert runtime.counter.snapshot().total == 0

    def test_oversized_body_is_rejected(self, build_client):
        client, _ = build_client()

        response = client.request("GET", REJECTION_PATH, content=b"x" * 2048)

        assert response.status_code == 400

    @pytest.mark.parametrize("user_agent", ["curl/8.4.0", "python-httpx/0.27", ""])
    def test_bots_are_forbidden_before_rate_limiting(self, build_client, user_agent):
        client, runtime = build_client()

        response = client.get(REJECTION_PATH, headers={"User-Agent": user_agent})

        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden", "message": "Suspicious activity detected"}
        assert runtime.limiter.bucket_count() == 0
        assert "X-Request-ID" in response.headers


class TestHealthEndpoint:
    """Tests for GET /api/v1/health."""

    def test_healthy_service(self, build_client):
        client, _ = build_client()
        client.get(REJECTION_PATH)

        response = client.get(HEALTH_PATH)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "UP"
        assert "timestamp" in body
        assert body["statistics"] == {
            "totalRequests": 1,
            "successfulRequests": 1,
            "errorRequests": 0,
            "successRate": 100.0,
            "cacheSize": 100,
            "cacheInitialized": True,
        }
        assert response.headers["Cache-Control"] == "no-cache"

    def test_low_success_rate_is_down(self, build_client):
        client, runtime = build_client()
        for _ in range(11):
            runtime.counter.next_request()
            runtime.counter.record_error()

        response = client.get(HEALTH_PATH)

        assert response.status_code == 503
        assert response.json()["status"] == "DOWN"
        assert response.json()["error"] == "Success rate below healthy threshold"

    def test_statistics_failure_is_down(self, build_client):
        client, runtime = build_client()

        with patch.object(runtime.counter, "snapshot", side_effect=RuntimeError("boom")):
            response = client.get(HEALTH_PATH)

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "DOWN"
        assert "error" in body
        assert "statistics" not in body


class TestNotReady:
    """Tests for requests served before the store is loaded."""

    @pytest.fixture
    def client_and_runtime(self, make_settings):
        # Without entering the client the lifespan never runs
        runtime = RejectionRuntime(make_settings())
        return TestClient(create_app(runtime.settings, runtime), headers=BROWSER_UA), runtime

    def test_fetch_is_unavailable(self, client_and_runtime):
        client, runtime = client_and_runtime

        response = client.get(REJECTION_PATH)

        assert response.status_code == 503
        assert response.json() == {
            "error": "Service Unavailable",
            "message": "Rejection service not ready - cache not initialized",
        }
        snapshot = runtime.counter.snapshot()
        assert (snapshot.total, snapshot.success, snapshot.errors) == (1, 0, 1)

    def test_health_is_down(self, client_and_runtime):
        client, _ = client_and_runtime

        response = client.get(HEALTH_PATH)

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "DOWN"
        assert body["error"] == "Rejection cache not initialized"
        assert body["statistics"]["cacheInitialized"] is False


class TestMetricsEndpoint:
    """Tests for GET /metrics."""

    def test_exposes_counters(self, build_client):
        client, _ = build_client()
        client.get(REJECTION_PATH)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        text = response.text
        assert "rejection_requests_total 1" in text
        assert "rejection_requests_success_total 1" in text
        assert "rejection_store_ready 1" in text
        assert 'rejection_ratelimit_buckets{pool="fetch"} 1' in text
        assert 'rejection_ratelimit_denied_total{pool="health"} 0' in text

    def test_metrics_are_not_rate_limited(self, build_client):
        client, _ = build_client(rate_limit_capacity=1)

        responses = [client.get("/metrics") for _ in range(3)]

        assert all(r.status_code == 200 for r in responses)
        assert "X-RateLimit-Limit" not in responses[0].headers
