"""``setlist run``: configure logging, build the playlist app, serve it."""

import argparse
import logging
import os
import secrets
import sys
from dataclasses import replace

from setlist.config import AppConfig
from setlist.errors import ConfigurationError
from setlist.playlists.app import create_app, default_config

logger = logging.getLogger("setlist.cli")

SECRET_ENV = "SETLIST_SECRET_KEY"


def config_from_args(args: argparse.Namespace) -> AppConfig:
    """Layer CLI flags over the bundled playlist config.

    Only flags that were given override a field. The session key comes
    from ``--secret-key``, then ``$SETLIST_SECRET_KEY``; it stays empty
    when neither is set.
    """
    overrides: dict[str, object] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.server is not None:
        overrides["server"] = args.server
    if args.debug:
        overrides["debug"] = True
        overrides["log_level"] = "debug"
    if args.data_file is not None:
        overrides["data_file"] = args.data_file
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    overrides["secret_key"] = args.secret_key or os.environ.get(SECRET_ENV, "")
    return default_config(**overrides)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_server(args: argparse.Namespace) -> None:
    """Start the playlist app on the configured server."""
    config = config_from_args(args)
    configure_logging(config.log_level)

    if not config.secret_key:
        logger.warning(
            "No %s set; using a random session key. Sessions will not survive a restart.",
            SECRET_ENV,
        )
        config = replace(config, secret_key=secrets.token_urlsafe(32))

    try:
        app = create_app(config)
        app.freeze()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logger.info("Serving on http://%s:%d (%s)", config.host, config.port, config.server)
    app.run()
