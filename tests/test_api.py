"""
HTTP API Tests

The app is built around a converter backed by the fake fetcher, so the
lifespan never wires real providers.
"""

import pytest
from fastapi.testclient import TestClient

from lira.main import create_app

from conftest import UPDATED


@pytest.fixture
def client(settings, converter):
    app = create_app(settings=settings, converter=converter)
    with TestClient(app) as test_client:
        yield test_client


class TestStatusEndpoint:

    def test_status(self, client):
        response = client.get("/status")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == (
            f"Lira Status as of {UPDATED} (UTC): "
            "1 Turkish Lira is equal to 0.0321428571 Euro, 0.0357142857 US Dollar"
        )

    def test_status_unavailable(self, client, fetcher):
        fetcher.fail = True

        response = client.get("/status")

        assert response.status_code == 503
        assert response.text == "No status available"

    def test_status_uses_stale_rates(self, client, fetcher, clock):
        assert client.get("/status").status_code == 200
        clock.advance(3600)
        fetcher.fail = True

        response = client.get("/status")

        assert response.status_code == 200
        assert "0.0321428571 Euro" in response.text


class TestConvertEndpoints:

    def test_rates_for_base(self, client):
        response = client.get("/convert/try")

        assert response.status_code == 200
        body = response.json()
        assert body["base"] == "TRY"
        assert body["updated"] == UPDATED
        assert body["results"]["TRY"] == 1.0
        assert body["results"]["EUR"] == pytest.approx(0.9 / 28.0)
        assert body["results"]["USD"] == pytest.approx(1 / 28.0)

    def test_unknown_base_is_client_error(self, client, fetcher):
        response = client.get("/convert/zzz")

        assert response.status_code == 400
        error = response.json()["detail"]["error"]
        assert error["code"] == "LIRA_UNKNOWN_CURRENCY"
        assert error["details"]["currency"] == "ZZZ"
        assert fetcher.calls == 0

    def test_rates_require_live_fetch(self, client, fetcher, clock):
        assert client.get("/convert/usd").status_code == 200
        clock.advance(3600)
        fetcher.fail = True

        response = client.get("/convert/usd")

        assert response.status_code == 502
        error = response.json()["detail"]["error"]
        assert error["code"] == "LIRA_UPSTREAM_UNAVAILABLE"
        assert error["message"] == "Unable to fetch requested info"

    def test_convert_targets(self, client):
        response = client.get("/convert/try/eur,usd")

        assert response.status_code == 200
        body = response.json()
        assert [item["target_currency"] for item in body] == ["EUR", "USD"]
        assert body[0]["base_currency"] == "TRY"
        assert body[0]["base_name"] == "Turkish Lira"
        assert body[0]["target_name"] == "Euro"
        assert body[0]["conversion_rate"] == pytest.approx(0.032142857, rel=1e-8)

    def test_convert_same_currency(self, client):
        response = client.get("/convert/eur/eur")

        assert response.status_code == 200
        assert response.json()[0]["conversion_rate"] == 1.0

    def test_convert_unknown_target(self, client):
        response = client.get("/convert/try/eur,zzz")

        assert response.status_code == 400
        assert response.json()["detail"]["error"]["details"]["currency"] == "ZZZ"

    def test_convert_too_many_targets(self, client):
        response = client.get("/convert/usd/eur,try,gbp,eur")

        assert response.status_code == 400
        assert response.json()["detail"]["error"]["code"] == "LIRA_TOO_MANY_TARGETS"

    def test_convert_without_targets(self, client, fetcher):
        response = client.get("/convert/usd/,")

        assert response.status_code == 400
        assert response.json()["detail"]["error"]["code"] == "LIRA_NO_TARGETS"
        assert fetcher.calls == 0

    def test_convert_upstream_failure(self, client, fetcher):
        fetcher.fail = True

        response = client.get("/convert/try/eur")

        assert response.status_code == 502


class TestHealthAndRoot:

    def test_health_before_first_fetch(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["providers"] == {"fake": True}
        assert body["cache_age_seconds"] is None
        assert body["cache_fresh"] is False
        assert body["cache_fetched_at"] is None

    def test_health_with_cache(self, client, clock):
        client.get("/convert/usd")
        clock.advance(10)

        body = client.get("/health").json()

        assert body["cache_age_seconds"] == 10
        assert body["cache_fresh"] is True
        assert body["cached_currencies"] == 2
        assert body["cache_fetched_at"] is not None

    def test_health_unavailable(self, client, fetcher):
        fetcher.fail = True

        response = client.get("/health")

        assert response.status_code == 503

    def test_root(self, client):
        body = client.get("/").json()

        assert body["name"] == "Lira Checker"
        assert body["api"]["status"] == "/status"
