"""
Proxy Service

The two operations the HTTP layer calls: the full playlist and a single
resolved stream URL.
"""
import logging

from tvproxy.services.catalog_service import fetch_catalog
from tvproxy.services.playlist_service import build_playlist
from tvproxy.services.registry_service import ChannelRegistry
from tvproxy.services.session_service import UpstreamSession
from tvproxy.services.stream_service import resolve_stream


logger = logging.getLogger(__name__)


class ProxyService:
    """Binds the upstream session, the channel registry and the public address."""

    def __init__(
        self,
        session: UpstreamSession,
        registry: ChannelRegistry,
        host: str,
        port: str,
        strict_login: bool = False,
    ):
        self.session = session
        self.registry = registry
        self.host = host
        self.port = port
        self.strict_login = strict_login

    async def get_playlist(self) -> str:
        """Fetch the live catalog and render it as a playlist."""
        groups = await fetch_catalog(self.session, require_login=self.strict_login)
        return build_playlist(groups, self.registry, self.host, self.port)

    async def get_stream_url(self, channel_id: str) -> str:
        """Resolve one channel to a fresh upstream playback URL."""
        return await resolve_stream(self.session, channel_id, require_login=self.strict_login)

    def status(self) -> dict:
        return {
            "session": self.session.status(),
            "registry_channels": len(self.registry),
        }
