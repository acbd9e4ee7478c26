"""``setlist routes``: list the playlist app's routes.

Prints a table of METHOD, PATH, and handler name, in registration order.
"""

import argparse

from setlist.playlists.app import create_app, default_config


def run_routes(args: argparse.Namespace) -> None:
    # The key is only needed to build the app; nothing is signed.
    app = create_app(default_config(secret_key="routes"))
    routes = app.router.routes

    rows: list[tuple[str, str, str]] = []
    for route in routes:
        methods_str = ", ".join(sorted(route.methods))
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        rows.append((methods_str, route.path, handler_name))

    max_methods = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))

    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    print("-" * min(max_methods + max_path + 4 + max(len(r[2]) for r in rows), 80))
    for methods_str, path, handler_name in rows:
        print(fmt.format(methods_str, path, handler_name))
