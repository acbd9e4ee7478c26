"""Built-in setlist template filters.

Auto-registered on every setlist kida Environment. They complement
kida's own filters with the few patterns the server-rendered forms need.
"""

from typing import Any


def field_errors(errors: Any, field_name: str) -> list[str]:
    """Extract validation errors for a single form field.

    Safely navigates a ``{field: [messages]}`` dict, returning an
    empty list when *errors* is None, missing, or the field has no
    errors.

    Example:
        {% for msg in errors | field_errors("username") %}
          <span class="error">{{ msg }}</span>
        {% end %}

    """
    if errors is None:
        return []
    if isinstance(errors, dict):
        val = errors.get(field_name, [])
        return list(val) if val else []
    return []


def form_value(form: Any, field_name: str, default: str = "") -> str:
    """Echo a submitted form value back into an input.

    Example:
        <input name="username" value="{{ form | form_value("username") }}">

    """
    if isinstance(form, dict):
        return str(form.get(field_name, default))
    return default


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Pluralize a word based on count.

    Example:
        {{ playlist.tracks | length | pluralize("track") }}  → "5 tracks"

    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


BUILTIN_FILTERS: dict[str, Any] = {
    "field_errors": field_errors,
    "form_value": form_value,
    "pluralize": pluralize,
}
