"""Validation result: immutable container for validated data or errors."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from setlist.errors import ValidationError


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating form data against a set of rules.

    ``is_valid`` is True when there are no errors.
    The result is falsy when invalid, so you can write::

        result = validate(form, rules)
        if not result:
            return helpers.view("form.html", {"form": form, "errors": result.errors}, 422)

    ``data`` contains the cleaned string values for all validated fields
    (only populated when there are no errors).

    ``errors`` maps field names to lists of error messages::

        {"username": ["This field is required"]}
    """

    data: dict[str, str]
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def __bool__(self) -> bool:
        """Falsy when invalid: enables ``if not result:`` pattern."""
        return self.is_valid

    def raise_for_errors(self, form: Mapping[str, str] | None = None, **context: Any) -> None:
        """Raise ``ValidationError`` when invalid.

        The dispatcher turns it into a 422 re-render of the route's form
        template, with *form* echoed back and *context* merged in.
        """
        if self.errors:
            raise ValidationError(self.errors, form, **context)
