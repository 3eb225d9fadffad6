"""
Channel Registry

Lookup table of locally curated channel metadata keyed by the upstream
channel id. Loaded once at startup and read-only afterwards.
"""
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

import aiofiles
from pydantic import ValidationError

from tvproxy.exceptions import ConfigError
from tvproxy.schemas import ChannelMetadata, ChannelsFile


logger = logging.getLogger(__name__)


class ChannelRegistry:
    """Read-only mapping of upstream channel id -> ChannelMetadata."""

    def __init__(self, channels: Iterable[ChannelMetadata] = ()):
        self._channels: dict[str, ChannelMetadata] = {}
        for channel in channels:
            if channel.issue_id in self._channels:
                logger.warning(f"Duplicate channel id '{channel.issue_id}' in registry, last entry wins")
            self._channels[channel.issue_id] = channel

    def get(self, channel_id: str) -> ChannelMetadata | None:
        return self._channels.get(channel_id)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[ChannelMetadata]:
        return iter(self._channels.values())


async def load_channel_registry(path: Path | str) -> ChannelRegistry:
    """
    Load channel metadata from a JSON file

    Args:
        path: Path to a file shaped like {"channels": [{"issue-id": ..., ...}]}

    Returns:
        Populated ChannelRegistry

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    if isinstance(path, str):
        path = Path(path)

    logger.info(f"Loading channel metadata from {path}")

    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            raw = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read channels file '{path}': {e}") from e

    try:
        channels_file = ChannelsFile.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid channels file '{path}': {e}") from e

    registry = ChannelRegistry(channels_file.channels)
    logger.info(f"Loaded {len(registry)} channels from {path}")
    return registry
