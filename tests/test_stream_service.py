"""Tests for stream resolution."""
from urllib.parse import parse_qs

import httpx
import pytest

from tvproxy.exceptions import LoginError, StreamResolutionError
from tvproxy.services.stream_service import parse_play_link, resolve_stream

from conftest import LOGIN_FAILED_BODY


class TestParsePlayLink:
    def test_returns_link(self):
        assert parse_play_link("42", '{"play_link": "https://cdn/x.m3u8?sig=1"}') == "https://cdn/x.m3u8?sig=1"

    @pytest.mark.parametrize("body", [
        "{}",
        '{"play_link": ""}',
        '{"play_link": null}',
        '{"play_link": "/relative/path.m3u8"}',
        "not json",
        "[]",
    ])
    def test_unusable_bodies_raise(self, body):
        with pytest.raises(StreamResolutionError) as exc_info:
            parse_play_link("42", body)
        assert exc_info.value.channel_id == "42"
        assert exc_info.value.raw_body == body


class TestResolveStream:
    @pytest.mark.asyncio
    async def test_returns_exact_play_link(self, upstream_session, upstream, login_route):
        stream_route = upstream.post("/content/get_stream").mock(
            return_value=httpx.Response(200, text='{"play_link":"http://cdn/x.m3u8?sig=abc"}')
        )

        url = await resolve_stream(upstream_session, "42")

        assert url == "http://cdn/x.m3u8?sig=abc"
        form = parse_qs(stream_route.calls.last.request.content.decode())
        assert form == {"issue_id": ["42"], "quality": ["0"], "type": ["live"]}

    @pytest.mark.asyncio
    async def test_every_call_resolves_again(self, upstream_session, upstream, login_route):
        stream_route = upstream.post("/content/get_stream")
        stream_route.side_effect = [
            httpx.Response(200, json={"play_link": "http://cdn/a.m3u8?sig=1"}),
            httpx.Response(200, json={"play_link": "http://cdn/a.m3u8?sig=2"}),
        ]

        first = await resolve_stream(upstream_session, "42")
        second = await resolve_stream(upstream_session, "42")

        assert (first, second) == ("http://cdn/a.m3u8?sig=1", "http://cdn/a.m3u8?sig=2")
        assert stream_route.call_count == 2
        assert login_route.call_count == 1

    @pytest.mark.asyncio
    async def test_missing_link_raises(self, upstream_session, upstream, login_route):
        upstream.post("/content/get_stream").mock(return_value=httpx.Response(200, json={"error": "no access"}))

        with pytest.raises(StreamResolutionError):
            await resolve_stream(upstream_session, "42")

    @pytest.mark.asyncio
    async def test_require_login_aborts_before_resolving(self, upstream_session, upstream):
        upstream.post("/user/login_page").mock(return_value=httpx.Response(200, text=LOGIN_FAILED_BODY))
        stream_route = upstream.post("/content/get_stream")

        with pytest.raises(LoginError):
            await resolve_stream(upstream_session, "42", require_login=True)
        assert stream_route.call_count == 0

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, upstream_session, upstream, login_route):
        upstream.post("/content/get_stream").mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(httpx.ReadTimeout):
            await resolve_stream(upstream_session, "42")
