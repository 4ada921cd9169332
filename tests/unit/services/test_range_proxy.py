"""
Tests pour RangeProxy.

Verifie:
- L'en-tete Range est transmis tel quel a l'amont
- Statut 206 et Content-Range recopies
- Corps relaye sans modification
- Erreurs amont traduites en ProxyStreamError
"""

import httpx
import pytest
import respx

from src.core.exceptions import ProxyStreamError
from src.services.range_proxy import RangeProxy

UPSTREAM = "https://emby.local:8096/Videos/m1/stream"


async def _drain(stream) -> bytes:
    return b"".join([chunk async for chunk in stream.body])


class TestRangeProxy:
    """Tests du relais Range."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_partial_content_is_relayed(self):
        # Setup mock
        payload = bytes(range(100))
        route = respx.get(UPSTREAM).mock(
            return_value=httpx.Response(
                206,
                content=payload,
                headers={
                    "Content-Range": "bytes 100-199/1000",
                    "Content-Type": "video/x-matroska",
                    "Accept-Ranges": "bytes",
                },
            )
        )

        # Execute
        stream = await RangeProxy(chunk_size=16).open(UPSTREAM, "bytes=100-199")
        body = await _drain(stream)

        # Verify
        assert route.calls.last.request.headers["Range"] == "bytes=100-199"
        assert route.calls.last.request.headers["Accept-Encoding"] == "identity"
        assert stream.status_code == 206
        assert stream.media_type == "video/x-matroska"
        assert stream.headers["Content-Range"] == "bytes 100-199/1000"
        assert stream.headers["Content-Length"] == "100"
        assert body == payload

    @pytest.mark.asyncio
    @respx.mock
    async def test_full_content_without_range(self):
        route = respx.get(UPSTREAM).mock(return_value=httpx.Response(200, content=b"abc"))

        stream = await RangeProxy().open(UPSTREAM)
        body = await _drain(stream)

        assert "Range" not in route.calls.last.request.headers
        assert stream.status_code == 200
        assert stream.media_type == "video/mp4"
        assert stream.headers["Accept-Ranges"] == "bytes"
        assert stream.headers["Access-Control-Allow-Origin"] == "*"
        assert stream.headers["Cache-Control"].startswith("no-cache")
        assert body == b"abc"

    @pytest.mark.asyncio
    @respx.mock
    async def test_upstream_error_status(self):
        respx.get(UPSTREAM).mock(return_value=httpx.Response(404))

        with pytest.raises(ProxyStreamError) as exc_info:
            await RangeProxy().open(UPSTREAM, "bytes=0-")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    @respx.mock
    async def test_upstream_unreachable(self):
        respx.get(UPSTREAM).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ProxyStreamError) as exc_info:
            await RangeProxy().open(UPSTREAM, "bytes=0-")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_each_open_uses_its_own_client(self):
        respx.get(UPSTREAM).mock(return_value=httpx.Response(200, content=b"x"))
        clients: list[httpx.AsyncClient] = []

        def factory() -> httpx.AsyncClient:
            client = httpx.AsyncClient()
            clients.append(client)
            return client

        proxy = RangeProxy(client_factory=factory)
        await _drain(await proxy.open(UPSTREAM))
        await _drain(await proxy.open(UPSTREAM))

        assert len(clients) == 2
        assert all(client.is_closed for client in clients)

    def test_upstream_headers(self):
        headers = RangeProxy.upstream_headers("bytes=5-")

        assert headers["Range"] == "bytes=5-"
        assert headers["Accept"] == "*/*"


class _FailingStream(httpx.AsyncByteStream):
    """Flux amont qui se coupe apres un premier morceau."""

    async def __aiter__(self):
        yield b"0123456789"
        raise httpx.ReadError("connection reset by peer")


class TestRelayLifecycle:
    """Tests de fin de relais : coupure amont et deconnexion client."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_upstream_failure_mid_stream_raises(self):
        # Setup mock
        respx.get(UPSTREAM).mock(return_value=httpx.Response(200, stream=_FailingStream()))
        clients: list[httpx.AsyncClient] = []

        def factory() -> httpx.AsyncClient:
            client = httpx.AsyncClient()
            clients.append(client)
            return client

        # Execute
        stream = await RangeProxy(client_factory=factory).open(UPSTREAM)

        # Verify: la coupure n'est pas une fin de fichier propre
        with pytest.raises(ProxyStreamError) as exc_info:
            await _drain(stream)
        assert isinstance(exc_info.value.__cause__, httpx.ReadError)
        assert clients[0].is_closed

    @pytest.mark.asyncio
    @respx.mock
    async def test_client_disconnect_closes_upstream(self):
        respx.get(UPSTREAM).mock(return_value=httpx.Response(200, content=bytes(100)))
        clients: list[httpx.AsyncClient] = []

        def factory() -> httpx.AsyncClient:
            client = httpx.AsyncClient()
            clients.append(client)
            return client

        stream = await RangeProxy(chunk_size=16, client_factory=factory).open(UPSTREAM)
        first = await stream.body.__anext__()
        assert not clients[0].is_closed

        await stream.body.aclose()

        assert len(first) == 16
        assert clients[0].is_closed
