"""URL-encoded form body parsing.

Only ``application/x-www-form-urlencoded`` bodies are decoded. The result
is a flat ``dict[str, str]``: when a field repeats, the **last** occurrence
wins (``name=a&name=b`` -> ``{"name": "b"}``). Controllers that need
multi-valued fields read them from the query string instead.
"""

from setlist.http.urlencoded import decode_text, parse_pairs

FORM_URLENCODED = "application/x-www-form-urlencoded"

# Methods whose requests carry no meaningful body
BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "DELETE", "TRACE"})


def parse_content_type(value: str) -> tuple[str, dict[str, str]]:
    """Split ``text/html; charset=utf-8`` into ``("text/html", {"charset": "utf-8"})``.

    The media type and parameter names are lower-cased.
    """
    media_type, *rest = value.split(";")
    params: dict[str, str] = {}
    for item in rest:
        name, sep, param_value = item.strip().partition("=")
        if sep:
            params[name.strip().lower()] = param_value.strip().strip('"')
    return media_type.strip().lower(), params


def parse_form_body(method: str, content_type: str | None, raw: bytes) -> dict[str, str] | None:
    """Decode a request body into a flat field dict, or ``None``.

    Returns ``None`` when the method has no body or the body is not a
    URL-encoded form. Raises ``MalformedRequestError`` on bad encoding.
    """
    if method in BODYLESS_METHODS or not content_type:
        return None
    media_type, params = parse_content_type(content_type)
    if media_type != FORM_URLENCODED:
        return None
    text = decode_text(raw, what="form body", encoding=params.get("charset", "utf-8"))
    # dict() keeps the last value for repeated names
    return dict(parse_pairs(text, what="form body"))
