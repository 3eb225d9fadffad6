"""
Services package for the live TV proxy

This package contains the session, catalog, playlist and stream logic.
"""
from tvproxy.services.catalog_service import fetch_catalog
from tvproxy.services.playlist_service import build_playlist
from tvproxy.services.proxy_service import ProxyService
from tvproxy.services.registry_service import ChannelRegistry, load_channel_registry
from tvproxy.services.session_service import SessionState, UpstreamSession
from tvproxy.services.stream_service import resolve_stream

__all__ = [
    'fetch_catalog',
    'build_playlist',
    'ProxyService',
    'ChannelRegistry',
    'load_channel_registry',
    'SessionState',
    'UpstreamSession',
    'resolve_stream',
]
