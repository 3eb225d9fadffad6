"""
Playlist Builder

Renders the catalog as an M3U playlist whose entries point back at this
proxy, so each stream URL is resolved only when a player opens the channel.
"""
import logging
from collections.abc import Sequence
from urllib.parse import quote_plus

from tvproxy.schemas import LiveChannel
from tvproxy.services.registry_service import ChannelRegistry


logger = logging.getLogger(__name__)

PLAYLIST_HEADER = "#EXTM3U"
PLAYLIST_PATH = "/playlist.m3u8"


def build_channel_url(self_host: str, self_port: str, channel_id: str, name: str) -> str:
    """Build the proxy URL a player opens to get redirected to the stream."""
    return (
        f"http://{self_host}:{self_port}{PLAYLIST_PATH}"
        f"?ch={quote_plus(channel_id)}&name={quote_plus(name)}"
    )


def build_playlist(
    catalog_groups: Sequence[Sequence[LiveChannel]],
    registry: ChannelRegistry,
    self_host: str,
    self_port: str,
) -> str:
    """
    Render catalog groups as playlist text

    Only the first variant of each group is used. Registry metadata wins over
    the upstream name when the channel id is known; unknown channels keep the
    upstream name and get blank metadata.

    Args:
        catalog_groups: Groups as returned by fetch_catalog
        registry: Local channel metadata
        self_host: Host players use to reach this proxy
        self_port: Port players use to reach this proxy

    Returns:
        Playlist document, one EXTINF/URL pair per group in upstream order
    """
    lines = [PLAYLIST_HEADER]
    matched = 0

    for group in catalog_groups:
        if not group:
            continue
        channel = group[0]
        channel_id = channel.issues_id
        name = channel.issues_name
        tvg_id = tvg_name = group_title = logo = ""

        metadata = registry.get(channel_id)
        if metadata is not None:
            matched += 1
            name = metadata.name
            tvg_id = metadata.tvg_id
            tvg_name = metadata.tvg_name
            group_title = metadata.group
            logo = metadata.logo

        lines.append(
            f'#EXTINF:-1 tvg-id="{tvg_id}" tvg-name="{tvg_name}" '
            f'tvg-logo="{logo}" group-title="{group_title}",{name}'
        )
        lines.append(build_channel_url(self_host, self_port, channel_id, name))

    logger.debug(f"Rendered playlist: {len(catalog_groups)} channels, {matched} with local metadata")
    return "\n".join(lines) + "\n"
