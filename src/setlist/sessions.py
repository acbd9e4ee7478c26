"""Signed cookie sessions.

Session data is serialized as JSON and signed using ``itsdangerous``.
The session is loaded once while the request is normalized, exposed to
controllers as ``request.session``, and signed back onto the response
by the server pipeline.

Sessions are signed, not encrypted: never store secrets in them.
"""

import logging
from collections.abc import Mapping
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from setlist.config import AppConfig
from setlist.errors import ConfigurationError
from setlist.http.cookies import SetCookie

logger = logging.getLogger("setlist.sessions")


class Session(dict[str, Any]):
    """Per-request session data.

    A plain dict with one extra operation, ``rotate()``, used on login and
    logout to discard everything from the previous session.
    """

    __slots__ = ()

    def rotate(self) -> None:
        """Clear the session so the response carries a fresh cookie value."""
        self.clear()


class SessionStore:
    """Loads and saves ``Session`` objects as signed cookies.

    Usage::

        store = SessionStore(AppConfig(secret_key="s3cr3t"))
        session = store.load(request.cookies)
        session["account_id"] = 7
        cookie = store.save(session)  # SetCookie for the response
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: AppConfig) -> None:
        if not config.secret_key:
            msg = "AppConfig.secret_key must not be empty when sessions are enabled."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="setlist.session")

    @property
    def cookie_name(self) -> str:
        return self._config.session_cookie

    def load(self, cookies: Mapping[str, str]) -> Session:
        """Verify and deserialize the session cookie.

        A missing, tampered, expired or non-dict cookie yields an empty
        session rather than an error.
        """
        value = cookies.get(self._config.session_cookie)
        if not value:
            return Session()
        try:
            data = self._serializer.loads(value, max_age=self._config.session_max_age)
        except BadData:
            logger.debug("Discarding invalid session cookie")
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session(data)

    def save(self, session: Session) -> SetCookie:
        """Serialize and sign *session* into a ``Set-Cookie`` directive."""
        cfg = self._config
        return SetCookie(
            name=cfg.session_cookie,
            value=self._serializer.dumps(dict(session)),
            max_age=cfg.session_max_age,
            secure=cfg.session_secure,
            samesite=cfg.session_samesite,
        )
