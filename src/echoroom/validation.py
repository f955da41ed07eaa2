"""Field and form validators.

Every validator is a pure function returning a ``ValidationResult``. Form
validators check fields in form order and return the first failure.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, NamedTuple

from echoroom.errors import ValidationError
from echoroom.models.experiment import OutcomeResult

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 1
DESCRIPTION_MAX_LENGTH = 2000
HYPOTHESIS_MIN_LENGTH = 1
HYPOTHESIS_MAX_LENGTH = 500
MIN_REFLECTION_LENGTH = 15
MAX_REFLECTION_LENGTH = 5000
OUTCOME_NOTES_MAX_LENGTH = 1000

VALID_OUTCOME_RESULTS = tuple(r.value for r in OutcomeResult)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


class ValidationResult(NamedTuple):
    valid: bool
    error: str | None = None

    def raise_for_error(self) -> None:
        """Raise ValidationError if this result is a failure."""
        if not self.valid:
            raise ValidationError(self.error or "Invalid input")


OK = ValidationResult(True)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(False, message)


def text_length(value: str) -> int:
    """Length in UTF-16 code units, so astral characters such as emoji count twice."""
    return len(value.encode("utf-16-le")) // 2


def _bounded_text(value: Any, label: str, min_length: int, max_length: int) -> ValidationResult:
    if not isinstance(value, str) or not value.strip():
        return _fail(f"{label} is required")
    length = text_length(value.strip())
    if length < min_length:
        return _fail(f"{label} must be at least {min_length} characters")
    if length > max_length:
        return _fail(f"{label} must be at most {max_length} characters")
    return OK


def validate_title(value: Any) -> ValidationResult:
    return _bounded_text(value, "Title", TITLE_MIN_LENGTH, TITLE_MAX_LENGTH)


def validate_description(value: Any) -> ValidationResult:
    return _bounded_text(value, "Description", DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH)


def validate_hypothesis(value: Any) -> ValidationResult:
    return _bounded_text(value, "Hypothesis", HYPOTHESIS_MIN_LENGTH, HYPOTHESIS_MAX_LENGTH)


def validate_reflection(value: Any) -> ValidationResult:
    return _bounded_text(value, "Reflection", MIN_REFLECTION_LENGTH, MAX_REFLECTION_LENGTH)


def validate_outcome_result(value: Any) -> ValidationResult:
    """Exact, case-sensitive match against the outcome results."""
    if not isinstance(value, str) or not value.strip():
        return _fail("Result is required")
    if value not in VALID_OUTCOME_RESULTS:
        return _fail("Result must be Success, Mixed, or Failed")
    return OK


def validate_outcome_notes(value: Any) -> ValidationResult:
    if value is None:
        return OK
    if not isinstance(value, str):
        return _fail("Notes must be text")
    if text_length(value) > OUTCOME_NOTES_MAX_LENGTH:
        return _fail(f"Notes must be at most {OUTCOME_NOTES_MAX_LENGTH} characters")
    return OK


def parse_date(value: Any) -> date | None:
    """Parse an ISO ``YYYY-MM-DD`` or ``MM/DD/YYYY`` string into a date.

    Returns None for anything that is not a real calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def validate_date(value: Any, label: str = "Date") -> ValidationResult:
    if value is None or (isinstance(value, str) and not value.strip()):
        return _fail(f"{label} is required")
    if parse_date(value) is None:
        return _fail(f"Invalid {label.lower()}")
    return OK


def validate_date_range(start: Any, end: Any) -> ValidationResult:
    """Both dates must parse; end may equal start but not precede it."""
    result = validate_date(start, "Start date")
    if not result.valid:
        return result
    result = validate_date(end, "End date")
    if not result.valid:
        return result
    if parse_date(end) < parse_date(start):
        return _fail("End date must be on or after start date")
    return OK


def _first_failure(*results: ValidationResult) -> ValidationResult:
    for result in results:
        if not result.valid:
            return result
    return OK


def validate_idea_form(title: Any, description: Any) -> ValidationResult:
    return _first_failure(validate_title(title), validate_description(description))


def validate_experiment_form(
    title: Any, hypothesis: Any, start_date: Any, end_date: Any
) -> ValidationResult:
    return _first_failure(
        validate_title(title),
        validate_hypothesis(hypothesis),
        validate_date_range(start_date, end_date),
    )


def validate_outcome_form(result: Any, notes: Any = None) -> ValidationResult:
    return _first_failure(validate_outcome_result(result), validate_outcome_notes(notes))


def validate_reflection_form(content: Any) -> ValidationResult:
    return validate_reflection(content)
