"""
Catalog Fetcher

Downloads the upstream live-channel catalog and decodes its nested shape:
a sequence of groups, each group listing the variants of one channel.
"""
import json
import logging

from pydantic import ValidationError

from tvproxy.exceptions import CatalogParseError, LoginError
from tvproxy.schemas import LiveChannel, catalog_adapter
from tvproxy.services.session_service import UpstreamSession


logger = logging.getLogger(__name__)

LIVE_CATALOG_PATH = "/content/live"
CATALOG_RESULT_KEY = "tv_choice_result"


def parse_catalog(raw_body: str) -> list[list[LiveChannel]]:
    """
    Decode a catalog response body

    Accepts either {"tv_choice_result": [[...], ...]} or the bare array of
    arrays.

    Raises:
        CatalogParseError: If the body is not JSON of the expected shape
    """
    try:
        payload = json.loads(raw_body)
    except ValueError as e:
        raise CatalogParseError(f"Catalog response is not JSON: {e}", raw_body) from e

    if isinstance(payload, dict):
        if CATALOG_RESULT_KEY not in payload:
            raise CatalogParseError(f"Catalog response has no '{CATALOG_RESULT_KEY}' key", raw_body)
        payload = payload[CATALOG_RESULT_KEY]

    try:
        return catalog_adapter.validate_python(payload)
    except ValidationError as e:
        raise CatalogParseError(
            f"Catalog response has unexpected shape ({e.error_count()} errors)", raw_body
        ) from e


async def fetch_catalog(
    session: UpstreamSession,
    require_login: bool = False,
) -> list[list[LiveChannel]]:
    """
    Fetch the live catalog with an authenticated request

    Args:
        session: Upstream session (may log in as a side effect)
        require_login: Raise LoginError instead of trying anyway when login fails

    Returns:
        Catalog groups in upstream order

    Raises:
        LoginError: If require_login is set and the session is not authenticated
        CatalogParseError: If the response body cannot be decoded
        httpx.HTTPError: On transport failures or non-2xx responses
    """
    authenticated = await session.ensure_authenticated()
    if not authenticated:
        if require_login:
            raise LoginError("Upstream session is not authenticated")
        logger.warning("Fetching catalog without an authenticated session")

    url = session.url(LIVE_CATALOG_PATH)
    logger.debug(f"Fetching live catalog from {url}")

    response = await session.client.get(url)
    response.raise_for_status()

    groups = parse_catalog(response.text)
    logger.info(f"Fetched live catalog: {len(groups)} channel groups")
    return groups
