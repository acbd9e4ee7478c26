"""Setlist CLI: serve the playlist app and inspect its routes.

Entry point registered as ``setlist`` in ``pyproject.toml``::

    [project.scripts]
    setlist = "setlist.cli:main"
"""

import argparse
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="setlist",
        description="Setlist: a multi-user playlist web app.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- setlist run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the web server")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--server",
        choices=["asgi", "wsgi"],
        default=None,
        help="Serve over ASGI (pounce) or WSGI (wsgiref)",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug logging and auto-reload (ASGI only)",
    )
    run_parser.add_argument(
        "--data-file",
        default=None,
        help="JSON file to persist accounts and playlists (default: memory only)",
    )
    run_parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Logging level",
    )
    run_parser.add_argument(
        "--secret-key",
        default=None,
        help="Session signing key (default: $SETLIST_SECRET_KEY)",
    )

    # -- setlist routes ---------------------------------------------------
    subparsers.add_parser("routes", help="List registered routes")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``setlist`` command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from setlist.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from setlist.cli._routes import run_routes

        run_routes(args)
