from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI

from tvproxy.config import CustomSettings, load_settings, setup_logging
from tvproxy.dependencies import get_service_locator, reset_service_locator
from tvproxy.routers import main_router
from tvproxy.services import ProxyService, UpstreamSession, load_channel_registry


setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("Starting Live TV Proxy...")

    locator = get_service_locator()
    client: httpx.AsyncClient | None = None

    try:
        if locator.is_registered(CustomSettings):
            settings = locator.get(CustomSettings)
        else:
            settings = load_settings()
            locator.register_singleton(CustomSettings, settings)
        setup_logging(settings.effective_log_level)

        registry = await load_channel_registry(settings.channels_file)

        client = httpx.AsyncClient(
            timeout=settings.upstream_timeout_sec,
            follow_redirects=True,
        )
        session = UpstreamSession(
            client,
            settings.username,
            settings.password.get_secret_value(),
            settings.upstream_base_url,
            validity_window_sec=settings.session_validity_sec,
        )
        locator.register_singleton(
            ProxyService,
            ProxyService(session, registry, settings.host, settings.port, strict_login=settings.strict_login),
        )
        logger.info(f"Live TV Proxy started, serving playlist at http://{settings.host}:{settings.port}/playlist.m3u8")
    except Exception as e:
        logger.error(f"Failed to start Live TV Proxy: {e}", exc_info=True)
        if client is not None:
            await client.aclose()
        raise

    yield

    logger.info("Shutting down Live TV Proxy...")
    await client.aclose()
    reset_service_locator()
    logger.info("Live TV Proxy stopped")


app = FastAPI(
    title="Live TV Proxy",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(main_router)
