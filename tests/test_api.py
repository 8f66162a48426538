"""Tests for the /api/prices routes via FastAPI's TestClient."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from price_proxy.api.app import create_app
from price_proxy.cache import PriceCache
from price_proxy.service import PriceService
from tests.helpers import TOKEN_A, TOKEN_B, TOKEN_C, FakeClock


@pytest.fixture
def client(service: PriceService) -> TestClient:
    return TestClient(create_app(service))


class TestGetPrice:
    def test_primary_price(self, client: TestClient) -> None:
        response = client.get("/api/prices", params={"token": TOKEN_A})
        assert response.status_code == 200
        assert response.json() == {"price": 1.25, "source": "primary", "cached": False}

    def test_cached_on_second_request(self, client: TestClient, primary: AsyncMock) -> None:
        client.get("/api/prices", params={"token": TOKEN_A.upper()})
        response = client.get("/api/prices", params={"token": TOKEN_A})
        assert response.json()["cached"] is True
        assert primary.fetch_prices.await_count == 1

    def test_fallback_source_reported(self, client: TestClient) -> None:
        response = client.get("/api/prices", params={"token": TOKEN_B})
        assert response.json() == {"price": 0.5, "source": "fallback", "cached": False}

    def test_total_failure_is_200_with_sentinel(self, client: TestClient) -> None:
        response = client.get("/api/prices", params={"token": TOKEN_C})
        assert response.status_code == 200
        assert response.json() == {
            "price": 0,
            "source": "none",
            "cached": False,
            "error": "All sources failed",
        }

    def test_retries_upstream_after_total_failure(
        self, client: TestClient, primary: AsyncMock
    ) -> None:
        client.get("/api/prices", params={"token": TOKEN_C})
        response = client.get("/api/prices", params={"token": TOKEN_C})
        assert response.json()["cached"] is False
        assert primary.fetch_prices.await_count == 2

    def test_expired_entry_refetched(
        self, client: TestClient, primary: AsyncMock, clock: FakeClock
    ) -> None:
        client.get("/api/prices", params={"token": TOKEN_A})
        clock.advance(5 * 60 + 1)
        response = client.get("/api/prices", params={"token": TOKEN_A})
        assert response.json()["cached"] is False
        assert primary.fetch_prices.await_count == 2

    @pytest.mark.parametrize("params", [{}, {"token": ""}, {"token": "   "}])
    def test_missing_token_is_400(self, client: TestClient, params: dict) -> None:
        response = client.get("/api/prices", params=params)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing token address"}

    @pytest.mark.parametrize("token", ["../../x", "0x1234", TOKEN_A + "00", "0x" + "g" * 40])
    def test_malformed_token_is_400(
        self, client: TestClient, primary: AsyncMock, token: str
    ) -> None:
        response = client.get("/api/prices", params={"token": token})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid token address"}
        primary.fetch_prices.assert_not_called()

    def test_unexpected_error_is_500(self, cache: PriceCache) -> None:
        broken = AsyncMock()
        broken.name = "broken"
        broken.fetch_prices = AsyncMock(side_effect=RuntimeError("boom"))
        client = TestClient(create_app(PriceService(cache, [broken])))

        response = client.get("/api/prices", params={"token": TOKEN_A})
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestGetPrices:
    def test_batch_partial_failure(self, client: TestClient) -> None:
        response = client.post("/api/prices", json={"tokens": [TOKEN_A, TOKEN_B, TOKEN_C]})
        assert response.status_code == 200
        assert response.json() == {
            "prices": {
                TOKEN_A: {"price": 1.25, "source": "primary"},
                TOKEN_B: {"price": 0.5, "source": "fallback"},
                TOKEN_C: {"price": 0, "source": "none"},
            }
        }

    def test_keys_are_lowercase(self, client: TestClient) -> None:
        response = client.post("/api/prices", json={"tokens": [TOKEN_A.upper()]})
        assert list(response.json()["prices"]) == [TOKEN_A]

    @pytest.mark.parametrize(
        "body",
        [
            {"tokens": []},
            {},
            {"tokens": TOKEN_A},
            {"tokens": [TOKEN_A, 42]},
            {"tokens": [""]},
            {"tokens": [TOKEN_A, "../../x"]},
            [TOKEN_A],
        ],
    )
    def test_invalid_body_is_400(
        self, client: TestClient, primary: AsyncMock, body: object
    ) -> None:
        response = client.post("/api/prices", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid token addresses"}
        primary.fetch_prices.assert_not_called()

    def test_unparseable_body_is_500(self, client: TestClient) -> None:
        response = client.post(
            "/api/prices",
            content=b"not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_repeat_batch_uses_cache(
        self, client: TestClient, primary: AsyncMock, fallback: AsyncMock
    ) -> None:
        body = {"tokens": [TOKEN_A, TOKEN_B]}
        first = client.post("/api/prices", json=body).json()
        second = client.post("/api/prices", json=body).json()
        assert first == second
        assert primary.fetch_prices.await_count == 1
        assert fallback.fetch_prices.await_count == 1


class TestHealth:
    def test_reports_cache_size(self, client: TestClient) -> None:
        client.get("/api/prices", params={"token": TOKEN_A})
        response = client.get("/health")
        assert response.json() == {"status": "ok", "cached_tokens": 1}

