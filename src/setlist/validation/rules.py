"""Validation rules for account and playlist forms.

A rule takes the submitted string and returns an error message, or
``None`` when the value is acceptable. Rules that need a setting (a
length, a pattern) are factories returning such a rule, so a field's
rules read as a plain list::

    {"name": [required, single_line, max_length(80)]}
"""

import re
import unicodedata
from collections.abc import Callable

type Validator = Callable[[str], str | None]


def required(value: str) -> str | None:
    """Field must contain something other than whitespace.

    ``validate()`` skips a field's remaining rules when this one fails.
    """
    if not value or not value.strip():
        return "This field is required"
    return None


def single_line(value: str) -> str | None:
    """No line breaks, tabs or other control characters.

    Playlist names, track titles and artists are shown on one line in
    listings.
    """
    if any(unicodedata.category(ch) == "Cc" for ch in value):
        return "Must be a single line of text"
    return None


def max_length(n: int) -> Validator:
    """At most *n* characters."""

    def check(value: str) -> str | None:
        if len(value) > n:
            return f"Must be at most {n} characters"
        return None

    return check


def min_length(n: int) -> Validator:
    """At least *n* characters."""

    def check(value: str) -> str | None:
        if len(value) < n:
            return f"Must be at least {n} characters"
        return None

    return check


def matches(pattern: str, message: str | None = None) -> Validator:
    """The whole value must match *pattern*; *message* replaces the default error."""
    compiled = re.compile(pattern)

    def check(value: str) -> str | None:
        if compiled.fullmatch(value) is None:
            return message or f"Must match pattern: {pattern}"
        return None

    return check
