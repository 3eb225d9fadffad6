"""
Stream Resolver

Exchanges a channel id for a short-lived signed playback URL. Links expire
quickly upstream, so nothing here is cached.
"""
import logging

from pydantic import ValidationError

from tvproxy.exceptions import LoginError, StreamResolutionError
from tvproxy.schemas import PlayLink
from tvproxy.services.session_service import UpstreamSession
from tvproxy.utils.logging_helpers import sanitize_url


logger = logging.getLogger(__name__)

GET_STREAM_PATH = "/content/get_stream"
GET_STREAM_PARAM_ISSUE = "issue_id"
GET_STREAM_PARAM_QUALITY = "quality"
GET_STREAM_PARAM_TYPE = "type"
GET_STREAM_VALUE_QUALITY = "0"
GET_STREAM_VALUE_TYPE = "live"


def parse_play_link(channel_id: str, raw_body: str) -> str:
    """
    Extract the playback URL from a stream resolution response

    Raises:
        StreamResolutionError: If the body is not JSON or the link is missing/invalid
    """
    try:
        link = PlayLink.model_validate_json(raw_body).play_link.strip()
    except ValidationError as e:
        raise StreamResolutionError(channel_id, "response is not a valid play link object", raw_body) from e

    if not link:
        raise StreamResolutionError(channel_id, "response has no play_link", raw_body)
    if not link.lower().startswith(("http://", "https://")):
        raise StreamResolutionError(channel_id, "play_link is not an absolute HTTP URL", raw_body)
    return link


async def resolve_stream(
    session: UpstreamSession,
    channel_id: str,
    require_login: bool = False,
) -> str:
    """
    Resolve one channel to its current playback URL

    Args:
        session: Upstream session (may log in as a side effect)
        channel_id: Upstream issue id of the channel
        require_login: Raise LoginError instead of trying anyway when login fails

    Returns:
        Absolute playback URL

    Raises:
        LoginError: If require_login is set and the session is not authenticated
        StreamResolutionError: If the response has no usable link
        httpx.HTTPError: On transport failures or non-2xx responses
    """
    authenticated = await session.ensure_authenticated()
    if not authenticated:
        if require_login:
            raise LoginError("Upstream session is not authenticated")
        logger.warning(f"Resolving channel {channel_id} without an authenticated session")

    form = {
        GET_STREAM_PARAM_ISSUE: channel_id,
        GET_STREAM_PARAM_QUALITY: GET_STREAM_VALUE_QUALITY,
        GET_STREAM_PARAM_TYPE: GET_STREAM_VALUE_TYPE,
    }

    response = await session.client.post(session.url(GET_STREAM_PATH), data=form)
    response.raise_for_status()

    link = parse_play_link(channel_id, response.text)
    logger.info(f"Resolved channel {channel_id} -> {sanitize_url(link)}")
    return link
