"""End-to-end tests for ProxyService against a mocked upstream."""
import httpx
import pytest

from tvproxy.exceptions import CatalogParseError, LoginError
from tvproxy.services.proxy_service import ProxyService

from conftest import LOGIN_FAILED_BODY, make_live_channel


@pytest.fixture
def proxy(upstream_session, registry):
    return ProxyService(upstream_session, registry, "proxy.lan", "8080")


class TestGetPlaylist:
    @pytest.mark.asyncio
    async def test_renders_registry_metadata_for_known_channel(self, proxy, upstream, login_route):
        upstream.get("/content/live").mock(return_value=httpx.Response(200, json={
            "tv_choice_result": [[make_live_channel("42", "Upstream Example")]]
        }))

        playlist = await proxy.get_playlist()

        assert playlist.splitlines() == [
            "#EXTM3U",
            '#EXTINF:-1 tvg-id="ex1" tvg-name="" tvg-logo="http://x/l.png" group-title="News",Example',
            "http://proxy.lan:8080/playlist.m3u8?ch=42&name=Example",
        ]

    @pytest.mark.asyncio
    async def test_malformed_catalog_produces_no_playlist(self, proxy, upstream, login_route):
        upstream.get("/content/live").mock(return_value=httpx.Response(200, text="<html></html>"))

        with pytest.raises(CatalogParseError):
            await proxy.get_playlist()


class TestGetStreamUrl:
    @pytest.mark.asyncio
    async def test_returns_resolved_url(self, proxy, upstream, login_route):
        upstream.post("/content/get_stream").mock(
            return_value=httpx.Response(200, text='{"play_link":"http://cdn/x.m3u8?sig=abc"}')
        )

        assert await proxy.get_stream_url("42") == "http://cdn/x.m3u8?sig=abc"

    @pytest.mark.asyncio
    async def test_strict_login_surfaces_login_failure(self, upstream_session, registry, upstream):
        upstream.post("/user/login_page").mock(return_value=httpx.Response(200, text=LOGIN_FAILED_BODY))
        proxy = ProxyService(upstream_session, registry, "h", "1", strict_login=True)

        with pytest.raises(LoginError):
            await proxy.get_stream_url("42")


class TestStatus:
    def test_reports_session_and_registry(self, proxy):
        status = proxy.status()
        assert status["session"]["state"] == "unauthenticated"
        assert status["registry_channels"] == 1
