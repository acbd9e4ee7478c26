"""Application configuration.

AppConfig is a frozen dataclass, so settings cannot change once the app is
built.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, secret_key="s3cr3t")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    server: str = "asgi"  # "asgi" (pounce) or "wsgi" (wsgiref)

    # Security
    secret_key: str = ""

    # Templates
    template_dir: str | Path = "templates"
    layout: str | None = None
    partials: Mapping[str, str] = field(default_factory=dict)  # name -> template
    error_template: str | None = "error.html"  # used only when the template exists
    autoescape: bool = True

    # Sessions (signed cookie; disabled when secret_key is empty)
    session_cookie: str = "setlist_session"
    session_max_age: int = 86400  # 24 hours
    session_secure: bool = False
    session_samesite: str = "lax"

    # Limits
    max_content_length: int = 1024 * 1024  # 1 MB
    handler_timeout: float | None = 10.0  # seconds; None disables

    # Persistence (playlists app): JSON file backing, None = memory only
    data_file: str | Path | None = None

    # Logging
    log_level: str = "info"
