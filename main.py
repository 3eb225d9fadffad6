"""Live TV Proxy.

Usage:
    python main.py [-ch FILE] [-v]

Credentials and the public address come from the USERNAME, PASSWORD, HOST
and PORT environment variables (or a .env file).
"""
import argparse
import logging
import sys

import uvicorn

from tvproxy.config import CustomSettings, load_settings, setup_logging
from tvproxy.dependencies import get_service_locator
from tvproxy.exceptions import ConfigError
from tvproxy.main import app


logger = logging.getLogger("tvproxy")


def main() -> None:
    parser = argparse.ArgumentParser(description="Live TV Proxy")
    parser.add_argument("-ch", "--channels", dest="channels_file", help="Channels data file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    overrides = {}
    if args.channels_file:
        overrides["channels_file"] = args.channels_file
    if args.verbose:
        overrides["verbose"] = True

    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        logger.critical(str(e))
        sys.exit(1)

    setup_logging(settings.effective_log_level)
    get_service_locator().register_singleton(CustomSettings, settings)

    uvicorn.run(
        app,
        host=settings.bind_address,
        port=int(settings.port),
        access_log=settings.verbose,
        log_level=settings.effective_log_level.lower(),
    )


if __name__ == "__main__":
    main()
