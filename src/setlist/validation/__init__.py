"""Form validation: composable rules, clean results.

Usage::

    from setlist.validation import validate, required, max_length

    def create(request, helpers):
        form = dict(request.body or {})
        result = validate(form, {"name": [required, max_length(80)]})
        result.raise_for_errors(form)  # 422 re-render of the form template
        ...
"""

from collections.abc import Mapping

from setlist.validation.result import ValidationResult
from setlist.validation.rules import (
    Validator,
    matches,
    max_length,
    min_length,
    required,
    single_line,
)

__all__ = [
    "ValidationResult",
    "Validator",
    "matches",
    "max_length",
    "min_length",
    "required",
    "single_line",
    "validate",
]


def validate(
    data: Mapping[str, str] | None,
    rules: dict[str, list[Validator]],
) -> ValidationResult:
    """Validate data against a set of rules.

    Args:
        data: A mapping of field names to string values (``request.body``),
            or ``None`` when the request carried no form, in which case
            every field is treated as empty.
        rules: A dict mapping field names to lists of validator
            functions. Each validator returns an error message string
            on failure, or ``None`` on success.

    Returns:
        A ``ValidationResult`` with ``.data`` (cleaned values) and
        ``.errors`` (field → list of error messages).
    """
    data = data or {}
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, str] = {}

    for field_name, validators in rules.items():
        value = data.get(field_name) or ""

        field_errors: list[str] = []
        for validator in validators:
            error = validator(value)
            if error is not None:
                field_errors.append(error)
                # Stop on first error for this field if it's a presence check
                # (no point running max_length on an empty string)
                if validator is required:
                    break

        if field_errors:
            errors[field_name] = field_errors
        else:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)
