"""
Tests unitaires pour le mecanisme de retry avec backoff exponentiel.

Ces tests verifient:
- TransientBackendError capture le statut et le header Retry-After
- with_retry relance sur TransientBackendError uniquement
- request_with_retry relance les statuts 429/502/503/504
- Les autres statuts d'erreur remontent immediatement
"""

import httpx
import pytest
import respx

from src.adapters.api.retry import (
    RETRYABLE_STATUSES,
    TransientBackendError,
    request_with_retry,
    with_retry,
)

BASE = "http://nas.local:8096"


class TestTransientBackendError:
    """Tests pour l'exception TransientBackendError."""

    def test_stores_status_and_retry_after(self) -> None:
        error = TransientBackendError(503, retry_after=60)
        assert error.status_code == 503
        assert error.retry_after == 60
        assert "503" in str(error)

    def test_without_retry_after(self) -> None:
        error = TransientBackendError(502)
        assert error.retry_after is None

    def test_retryable_statuses(self) -> None:
        assert RETRYABLE_STATUSES == {429, 502, 503, 504}


class TestWithRetryDecorator:
    """Tests pour le decorateur with_retry."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self) -> None:
        """with_retry relance tant que l'erreur est transitoire."""
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def flaky() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise TransientBackendError(503)
            return "ok"

        assert await flaky() == "ok"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_stops_after_max_attempts(self) -> None:
        """with_retry abandonne et releve la derniere erreur."""
        call_count = 0

        @with_retry(max_attempts=2, max_wait=1)
        async def always_busy() -> str:
            nonlocal call_count
            call_count += 1
            raise TransientBackendError(429)

        with pytest.raises(TransientBackendError):
            await always_busy()
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_does_not_retry_other_exceptions(self) -> None:
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def broken() -> str:
            nonlocal call_count
            call_count += 1
            raise ValueError("bad payload")

        with pytest.raises(ValueError):
            await broken()
        assert call_count == 1


class TestRequestWithRetry:
    """Tests pour request_with_retry."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_on_503_then_succeeds(self) -> None:
        # Setup mock
        route = respx.get(f"{BASE}/System/Info").mock(
            side_effect=[
                httpx.Response(503, headers={"Retry-After": "1"}),
                httpx.Response(200, json={"ServerName": "nas"}),
            ]
        )

        # Execute
        async with httpx.AsyncClient(base_url=BASE) as client:
            response = await request_with_retry(client, "GET", "/System/Info")

        # Verify
        assert response.status_code == 200
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_gives_up_after_max_attempts(self) -> None:
        route = respx.get(f"{BASE}/System/Info").mock(return_value=httpx.Response(502))

        async with httpx.AsyncClient(base_url=BASE) as client:
            with pytest.raises(TransientBackendError) as exc_info:
                await request_with_retry(client, "GET", "/System/Info", max_attempts=2)

        assert exc_info.value.status_code == 502
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_permanent_error_is_not_retried(self) -> None:
        route = respx.get(f"{BASE}/Users/u1/Items/x").mock(return_value=httpx.Response(404))

        async with httpx.AsyncClient(base_url=BASE) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await request_with_retry(client, "GET", "/Users/u1/Items/x")

        assert route.call_count == 1
