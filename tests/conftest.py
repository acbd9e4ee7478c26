"""Shared fixtures for setlist tests."""

import pytest
from kida import DictLoader, Environment

from setlist.app import App
from setlist.config import AppConfig
from setlist.playlists.app import create_app, default_config
from setlist.playlists.store import MemoryStore

LAYOUT_TEMPLATES = {
    "layout.html": "<html><nav>{{ nav }}</nav><main>{{ body }}</main></html>",
    "nav.html": "{% if user is defined %}{{ user }}{% else %}guest{% end %}",
    "page.html": "<p>{{ message }}</p>",
    "form.html": (
        "<form>{% for msg in errors | field_errors(\"name\") %}"
        "<span class=\"error\">{{ msg }}</span>{% end %}"
        "<input value=\"{{ form | form_value(\"name\") }}\"></form>"
    ),
    "error.html": "<h1>{{ status }} {{ reason }}</h1>",
}


def dict_env(templates: dict[str, str]) -> Environment:
    return Environment(loader=DictLoader(templates))


@pytest.fixture
def layout_app() -> App:
    """An app with a layout, a ``nav`` partial and in-memory templates."""
    config = AppConfig(
        layout="layout.html",
        partials={"nav": "nav.html"},
        secret_key="test-secret",
    )
    return App(config, kida_env=dict_env(LAYOUT_TEMPLATES))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def playlist_app(store: MemoryStore) -> App:
    return create_app(default_config(secret_key="test-secret"), store=store)
