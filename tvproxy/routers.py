from typing import Annotated
import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse, Response

from tvproxy.config import CustomSettings
from tvproxy.dependencies import get_app_settings, get_proxy_service
from tvproxy.exceptions import UpstreamError
from tvproxy.services.playlist_service import PLAYLIST_PATH
from tvproxy.services.proxy_service import ProxyService
from tvproxy.utils.logging_helpers import log_request_failure, sanitize_url


logger = logging.getLogger(__name__)

main_router = APIRouter()

PLAYLIST_MEDIA_TYPE = "application/x-mpegURL"


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "Live TV Proxy",
        "version": "0.1.0",
        "endpoints": {
            "playlist": f"{PLAYLIST_PATH} - Full playlist, or ?ch=<id>&name=<name> to open one channel",
            "epg": "/epg.xml - Redirect to the EPG document",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check(
    proxy: Annotated[ProxyService, Depends(get_proxy_service)]
) -> dict:
    """Health check endpoint"""
    return {
        "status": "ok",
        **proxy.status()
    }


@main_router.get("/epg.xml")
async def epg_redirect(
    settings: Annotated[CustomSettings, Depends(get_app_settings)]
) -> RedirectResponse:
    """Redirect to the third-party EPG document"""
    return RedirectResponse(settings.epg_redirect_url, status_code=301)


@main_router.get(PLAYLIST_PATH)
async def playlist(
    proxy: Annotated[ProxyService, Depends(get_proxy_service)],
    ch: Annotated[str | None, Query(description="Upstream channel id to open")] = None,
    name: Annotated[str | None, Query(description="Channel display name")] = None,
) -> Response:
    """
    Serve the playlist, or redirect to one channel's stream

    Without `ch` the full playlist is returned. With `ch` (and `name`, which
    every generated playlist URL carries, possibly empty) the channel is resolved upstream
    and the player is redirected to the signed stream URL.
    """
    logger.debug(f"{PLAYLIST_PATH} called (ch={ch}, name={name})")

    if ch:
        # Blank names are valid: channels without a display name render as name=
        if name is None:
            logger.debug("Query parameter 'name' is missing")
            raise HTTPException(status_code=400, detail="Query parameter 'name' is required with 'ch'")

        try:
            url = await proxy.get_stream_url(ch)
        except (UpstreamError, httpx.HTTPError) as e:
            log_request_failure(logger, f"Stream resolution for channel {ch}", e)
            raise HTTPException(status_code=502, detail=f"Could not resolve stream for channel {ch}")

        logger.info(f"Serving channel {ch} ({name}): {sanitize_url(url)}")
        return RedirectResponse(url, status_code=301)

    try:
        body = await proxy.get_playlist()
    except (UpstreamError, httpx.HTTPError) as e:
        log_request_failure(logger, "Playlist generation", e)
        raise HTTPException(status_code=502, detail="Could not fetch the live catalog")

    logger.debug(f"Serving playlist ({len(body)} bytes)")
    return Response(
        content=body,
        media_type=PLAYLIST_MEDIA_TYPE,
        headers={"Content-Disposition": 'filename="playlist.m3u8"'}
    )
