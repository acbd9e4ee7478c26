"""Strict percent-decoding for paths, query strings and form bodies.

``urllib.parse.unquote`` silently passes malformed escapes through
(``"%zz"`` stays ``"%zz"``) and replaces undecodable bytes. The
normalizer needs the opposite: any malformed component rejects the
whole request with ``MalformedRequestError``.
"""

import re
from urllib.parse import unquote_to_bytes

from setlist.errors import MalformedRequestError

# A "%" that is not followed by exactly two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def unquote_strict(value: str, *, plus_as_space: bool = True, what: str = "value") -> str:
    """Percent-decode *value* as UTF-8, rejecting malformed input.

    ``+`` decodes to a space in query strings and form bodies
    (``plus_as_space=True``) but stays literal in paths.
    """
    if plus_as_space:
        value = value.replace("+", " ")
    if "%" not in value:
        return value
    if _BAD_ESCAPE.search(value):
        msg = f"Malformed percent-encoding in {what}"
        raise MalformedRequestError(msg)
    try:
        return unquote_to_bytes(value).decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Percent-encoded {what} is not valid UTF-8"
        raise MalformedRequestError(msg) from exc


def decode_text(raw: bytes, *, what: str, encoding: str = "utf-8") -> str:
    """Decode raw wire bytes, mapping failures to ``MalformedRequestError``."""
    try:
        return raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        msg = f"Cannot decode {what} as {encoding}"
        raise MalformedRequestError(msg) from exc


def parse_pairs(text: str, *, what: str) -> list[tuple[str, str]]:
    """Split ``a=1&b=2`` into decoded ``(name, value)`` pairs, in order.

    Blank values are kept (``a=`` -> ``("a", "")``); empty chunks
    (``a=1&&b=2``) are skipped.
    """
    pairs: list[tuple[str, str]] = []
    for chunk in text.split("&"):
        if not chunk:
            continue
        name, _, value = chunk.partition("=")
        pairs.append((unquote_strict(name, what=what), unquote_strict(value, what=what)))
    return pairs


def decode_path(raw_path: str) -> str:
    """Decode a raw request path. ``+`` is literal in paths."""
    return unquote_strict(raw_path, plus_as_space=False, what="path")
