"""Submission validation against a form's field definitions.

Every field is checked and every failure is collected, so callers can
report all problems at once. Unknown keys in the payload are ignored.
"""

import math
import re
from typing import Any, List, Mapping, Optional

from ez_forms.models.field_type import FieldType
from ez_forms.models.form_field import BaseField

# Field types whose min/max bound the character length of the value
LENGTH_BOUNDED_TYPES = frozenset({FieldType.TEXT, FieldType.EMAIL, FieldType.TEXTAREA})


def has_value(field: BaseField, value: Any) -> bool:
    """A value is present unless it is absent, an empty string, or an empty selection"""
    if value is None:
        return False
    if field.multi_value and isinstance(value, (list, tuple, set)):
        return len(value) > 0
    if isinstance(value, str):
        return value != ""
    return True


def _parse_number(value: Any) -> Optional[float]:
    """Finite float for a submitted number, or None if it cannot be read as one"""
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _shape_error(field: BaseField, value: Any) -> str | None:
    if field.multi_value:
        if not isinstance(value, (list, tuple, set)) or not all(
            isinstance(item, str) for item in value
        ):
            return f"{field.label} must be a list of options"
        return None

    if field.type == FieldType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return f"{field.label} must be a number"
        if _parse_number(value) is None:
            return f"{field.label} must be a valid number"
        return None

    if not isinstance(value, str):
        return f"{field.label} must be text"
    return None


def _constraint_errors(field: BaseField, value: Any) -> List[str]:
    rules = field.validation
    errors = []

    if field.type == FieldType.NUMBER:
        if rules.min is not None or rules.max is not None:
            number = _parse_number(value)
            if rules.min is not None and number < rules.min:
                errors.append(f"{field.label} must be at least {rules.min:g}")
            if rules.max is not None and number > rules.max:
                errors.append(f"{field.label} must be at most {rules.max:g}")

    elif field.type in LENGTH_BOUNDED_TYPES:
        if rules.min is not None and len(value) < rules.min:
            errors.append(f"{field.label} must be at least {rules.min:g} characters")
        if rules.max is not None and len(value) > rules.max:
            errors.append(f"{field.label} must be at most {rules.max:g} characters")

    elif field.multi_value:
        if rules.min is not None and len(value) < rules.min:
            errors.append(f"Select at least {rules.min:g} options for {field.label}")
        if rules.max is not None and len(value) > rules.max:
            errors.append(f"Select at most {rules.max:g} options for {field.label}")

    if rules.pattern:
        candidates = value if field.multi_value else [str(value)]
        if any(re.fullmatch(rules.pattern, item) is None for item in candidates):
            errors.append(f"{field.label} is not in the expected format")

    return errors


def validate_submission(
    fields: List[BaseField], data: Mapping[str, Any]
) -> List[str]:
    """
    Check submitted values against the form's fields.

    Args:
        fields: Ordered field definitions of the form
        data: Submitted values keyed by field id

    Returns:
        Error messages in field order; empty when the submission is accepted
    """
    errors = []

    for field in fields:
        value = data.get(field.id)

        if not has_value(field, value):
            if field.required:
                errors.append(f"{field.label} is required")
            continue

        shape_error = _shape_error(field, value)
        if shape_error:
            errors.append(shape_error)
            continue

        if field.validation is not None:
            errors.extend(_constraint_errors(field, value))

    return errors


def clean_submission(fields: List[BaseField], data: Mapping[str, Any]) -> dict:
    """
    Project accepted data onto the form's fields for storage.

    Keys that match no field are dropped and checkbox selections are
    de-duplicated in submission order. Only call this after
    ``validate_submission`` returned no errors.
    """
    cleaned = {}
    for field in fields:
        value = data.get(field.id)
        if not has_value(field, value):
            continue
        if field.multi_value:
            cleaned[field.id] = list(dict.fromkeys(value))
        else:
            cleaned[field.id] = value
    return cleaned
