"""
Pytest configuration and shared fixtures for proxy tests.
"""
import httpx
import pytest
import respx

from tvproxy.schemas import ChannelMetadata
from tvproxy.services.registry_service import ChannelRegistry
from tvproxy.services.session_service import UpstreamSession


UPSTREAM_URL = "http://upstream.test"
VALIDITY_WINDOW_SEC = 8 * 60 * 60
LOGIN_OK_BODY = "<html><script>var LOGGED = '1';</script></html>"
LOGIN_FAILED_BODY = "<html><script>var LOGGED = '0';</script></html>"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_live_channel(issues_id: str = "42", issues_name: str = "Upstream Example", **kwargs) -> dict:
    """Generate a sample upstream catalog variant dict."""
    return {
        "product_id": kwargs.get("product_id", f"p{issues_id}"),
        "product_group_id": kwargs.get("product_group_id", "1"),
        "product_name": kwargs.get("product_name", issues_name),
        "issues_id": issues_id,
        "issues_name": issues_name,
        "hls_url": kwargs.get("hls_url", f"http://cdn.test/{issues_id}/index.m3u8"),
        "program": kwargs.get("program", []),
        **{k: v for k, v in kwargs.items() if k not in ["product_id", "product_group_id", "product_name", "hls_url", "program"]}
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    return ChannelRegistry([
        ChannelMetadata.model_validate({
            "issue-id": "42",
            "name": "Example",
            "tvg-id": "ex1",
            "group": "News",
            "logo": "http://x/l.png",
        }),
    ])


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient(follow_redirects=True) as client:
        yield client


@pytest.fixture
def upstream_session(http_client, clock):
    return UpstreamSession(
        http_client,
        "user",
        "secret",
        UPSTREAM_URL,
        validity_window_sec=VALIDITY_WINDOW_SEC,
        clock=clock,
    )


@pytest.fixture
def upstream():
    """respx router bound to the fake upstream base URL."""
    with respx.mock(base_url=UPSTREAM_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def login_route(upstream):
    return upstream.post("/user/login_page").mock(
        return_value=httpx.Response(
            200,
            text=LOGIN_OK_BODY,
            headers={"Set-Cookie": "sid=first; Path=/"},
        )
    )
