"""Test utilities for setlist applications.

Provides an in-process ASGI test client and a WSGI test client. Both
return the same ``Response`` type as production and keep a cookie jar,
so a session survives from one request to the next::

    from setlist.testing import TestClient, WSGITestClient
"""

from setlist.testing.client import CookieJar, TestClient
from setlist.testing.wsgi import WSGITestClient

__all__ = [
    "CookieJar",
    "TestClient",
    "WSGITestClient",
]
