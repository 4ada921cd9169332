"""
Tests pour BackendTransport et le decorateur degrade_to.
"""

import httpx
import pytest
import respx

from src.adapters.api.transport import BackendTransport, degrade_to
from src.core.entities.connection import BackendKind
from src.core.exceptions import ConnectivityError

BASE = "http://nas.local:8096"


@pytest.fixture
def transport() -> BackendTransport:
    return BackendTransport(BASE, token_header="X-Emby-Token", timeout=5.0, api_key="key")


class TestCredentials:
    """Tests de l'injection des identifiants."""

    def test_api_key_as_param_without_token(self, transport):
        assert transport.auth_params() == {"api_key": "key"}
        assert transport.auth_headers() == {}
        assert transport.credential == "key"

    def test_token_replaces_api_key(self, transport):
        transport.set_access_token("tok")

        assert transport.auth_params() == {}
        assert transport.auth_headers() == {"X-Emby-Token": "tok"}
        assert transport.credential == "tok"

    def test_url_with_params(self, transport):
        url = transport.url("/Videos/1/stream", {"Static": "true"})
        assert url == f"{BASE}/Videos/1/stream?Static=true"


class TestRequest:
    """Tests de traduction des erreurs."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_json(self, transport):
        route = respx.get(f"{BASE}/System/Info").mock(
            return_value=httpx.Response(200, json={"ServerName": "nas"})
        )

        data = await transport.get_json("/System/Info", retry=False)

        assert data == {"ServerName": "nas"}
        assert route.calls.last.request.url.params["api_key"] == "key"
        await transport.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_status_error_becomes_connectivity_error(self, transport):
        respx.get(f"{BASE}/System/Info").mock(return_value=httpx.Response(401))

        with pytest.raises(ConnectivityError) as exc_info:
            await transport.get_json("/System/Info", retry=False)

        assert exc_info.value.status_code == 401
        await transport.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_has_no_status(self, transport):
        respx.get(f"{BASE}/System/Info").mock(side_effect=httpx.ConnectTimeout("slow"))

        with pytest.raises(ConnectivityError) as exc_info:
            await transport.get_json("/System/Info", retry=False)

        assert exc_info.value.status_code is None
        await transport.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self, transport):
        respx.get(f"{BASE}/System/Info").mock(
            return_value=httpx.Response(200, content=b"<html>")
        )

        with pytest.raises(ConnectivityError):
            await transport.get_json("/System/Info", retry=False)
        await transport.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_exhausted(self, transport):
        route = respx.get(f"{BASE}/Users/u1/Views").mock(return_value=httpx.Response(504))

        with pytest.raises(ConnectivityError) as exc_info:
            await transport.get_json("/Users/u1/Views", retry=True)

        assert exc_info.value.status_code == 504
        assert route.call_count == 3
        await transport.close()


class _FakeAdapter:
    kind = BackendKind.EMBY

    @degrade_to(list)
    async def unreachable(self):
        raise ConnectivityError("down")

    @degrade_to(lambda: None)
    async def malformed(self):
        return {}["Id"]

    @degrade_to(lambda: False)
    async def ok(self):
        return True


class TestDegradeTo:
    """Tests du decorateur de frontiere."""

    @pytest.mark.asyncio
    async def test_connectivity_error_degrades(self):
        assert await _FakeAdapter().unreachable() == []

    @pytest.mark.asyncio
    async def test_malformed_payload_degrades(self):
        assert await _FakeAdapter().malformed() is None

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        assert await _FakeAdapter().ok() is True
