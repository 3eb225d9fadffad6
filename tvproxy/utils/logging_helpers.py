"""
Logging helpers shared by the proxy services.
"""
import logging
from urllib.parse import urlsplit, urlunsplit


def sanitize_url(url: str) -> str:
    """
    Strip query string and fragment from a URL before logging it.

    Resolved stream URLs carry signatures in the query string; they must not
    end up in logs.
    """
    parts = urlsplit(url)
    if not parts.query and not parts.fragment:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", "")) + "?..."


def truncate_body(body: str, limit: int = 200) -> str:
    """Shorten an upstream response body for diagnostics."""
    body = body.strip()
    if len(body) <= limit:
        return body
    return f"{body[:limit]}... ({len(body)} chars)"


def log_request_failure(logger: logging.Logger, operation: str, error: Exception) -> None:
    """
    Log a failed proxy operation with the upstream body when one is attached.

    Args:
        logger: Logger instance
        operation: Short description of what failed
        error: The raised exception
    """
    logger.error(f"{operation} failed: {type(error).__name__}: {error}")
    raw_body = getattr(error, "raw_body", "")
    if raw_body:
        logger.debug(f"Upstream body: {truncate_body(raw_body)}")
