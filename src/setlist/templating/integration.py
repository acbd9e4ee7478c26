"""Kida environment setup and app binding.

Creates a kida Environment from setlist's AppConfig and binds
user-registered filters and globals. The environment is created
once during App.freeze() and shared by every request.
"""

from collections.abc import Callable
from typing import Any

from kida import Environment, FileSystemLoader

from setlist.config import AppConfig
from setlist.templating.filters import BUILTIN_FILTERS


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Called once during ``App.freeze()``. Templates are never reloaded:
    the renderer compiles them all at startup and the cache is read-only
    afterwards.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=False,
        bytecode_cache=False,
    )
    bind_environment(env, filters, globals_)
    return env


def bind_environment(
    env: Environment,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> None:
    """Register built-in and user filters and globals on *env*.

    Also applied to an environment passed in with ``App(kida_env=...)``.
    """
    env.update_filters(BUILTIN_FILTERS)

    # User-defined filters may override built-ins
    if filters:
        env.update_filters(filters)

    for name, value in globals_.items():
        env.add_global(name, value)
