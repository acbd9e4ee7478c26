"""Playlist application factory.

Usage::

    from setlist.playlists.app import create_app

    app = create_app(AppConfig(secret_key="s3cr3t", data_file="setlist.json"))
    app.run()
"""

from dataclasses import replace
from pathlib import Path

from setlist.app import App
from setlist.config import AppConfig
from setlist.errors import ConfigurationError
from setlist.playlists import accounts, playlists
from setlist.playlists.store import MemoryStore

TEMPLATES_DIR = Path(__file__).parent / "templates"

LAYOUT = "layout.html"
PARTIALS = {
    "nav": "partials/nav.html",
    "notice": "partials/notice.html",
}


def default_config(**overrides: object) -> AppConfig:
    """AppConfig pointing at the bundled templates, layout and partials."""
    config = AppConfig(
        template_dir=TEMPLATES_DIR,
        layout=LAYOUT,
        partials=PARTIALS,
        error_template="error.html",
    )
    return replace(config, **overrides)


def create_app(config: AppConfig | None = None, store: MemoryStore | None = None) -> App:
    """Build the playlist app.

    Sign-in state lives in the session, so ``config.secret_key`` must be
    set. Without a *store*, one is created from ``config.data_file``.
    """
    config = config or default_config()
    if not config.secret_key:
        msg = "The playlist app needs AppConfig.secret_key for its login sessions."
        raise ConfigurationError(msg)

    store = store if store is not None else MemoryStore(config.data_file)
    app = App(config)
    accounts.register(app, store)
    playlists.register(app, store)
    return app
