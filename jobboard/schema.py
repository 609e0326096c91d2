import math
from decimal import Decimal
from typing import Any, List, Mapping

from .exceptions import ValidationError
from .query import FilterCriteria

NEW_JOB_REQUIRED_STR_FIELDS = ["title", "company_handle"]
NEW_JOB_OPTIONAL_FIELDS = ["salary", "equity"]
FILTER_FIELDS = ["title", "min_salary", "has_equity"]

COMPANY_REQUIRED_STR_FIELDS = ["handle", "name"]
COMPANY_OPTIONAL_STR_FIELDS = ["description", "logo_url"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_int(v: Any) -> bool:
    # bool is an int subclass; True is not a salary
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float, Decimal)) and not isinstance(v, bool)


def _is_finite(v: Any) -> bool:
    if isinstance(v, Decimal):
        return v.is_finite()
    return math.isfinite(v)


def _check_non_negative_int(data: Mapping[str, Any], field: str, errors: List[str]) -> None:
    if data.get(field) is None:
        return
    if not _is_int(data[field]):
        errors.append(f"Field '{field}' must be an integer")
    elif data[field] < 0:
        errors.append(f"Field '{field}' must be >= 0")


def _check_equity(data: Mapping[str, Any], errors: List[str]) -> None:
    if data.get("equity") is None:
        return
    if not _is_number(data["equity"]):
        errors.append("Field 'equity' must be a number")
    elif not _is_finite(data["equity"]):
        errors.append("Field 'equity' must be a finite number")
    elif not 0 <= data["equity"] <= 1:
        errors.append("Field 'equity' must be between 0 and 1")


def _check_unknown(data: Mapping[str, Any], allowed: List[str], errors: List[str]) -> None:
    for f in data:
        if f not in allowed:
            errors.append(f"Unknown field: {f}")


def validate_new_job(data: Mapping[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a job to create.
    Empty list means valid.
    """
    errors: List[str] = []

    for f in NEW_JOB_REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    _check_non_negative_int(data, "salary", errors)
    _check_equity(data, errors)
    _check_unknown(data, NEW_JOB_REQUIRED_STR_FIELDS + NEW_JOB_OPTIONAL_FIELDS, errors)
    return errors


def validate_job_update(data: Mapping[str, Any]) -> List[str]:
    """
    Type checks for the values of a partial job update.

    Which keys may be updated at all is decided by the update compiler's
    allow-list, so unknown keys are not reported here.
    """
    errors: List[str] = []

    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")
    _check_non_negative_int(data, "salary", errors)
    _check_equity(data, errors)
    return errors


def validate_filter(data: Mapping[str, Any]) -> List[str]:
    """Returns a list of error messages for job search filters."""
    errors: List[str] = []

    if data.get("title") is not None and not isinstance(data["title"], str):
        errors.append("Filter 'title' must be a string")
    _check_non_negative_int(data, "min_salary", errors)
    if data.get("has_equity") is not None and not isinstance(data["has_equity"], bool):
        errors.append("Filter 'has_equity' must be true or false")
    _check_unknown(data, FILTER_FIELDS, errors)
    return errors


def parse_filter(data: Mapping[str, Any]) -> FilterCriteria:
    """
    Build FilterCriteria from raw caller input.

    Raises:
        ValidationError: a filter has the wrong type or is unknown
    """
    errors = validate_filter(data)
    if errors:
        raise ValidationError("Invalid job filter", errors)
    return FilterCriteria(
        title=data.get("title"),
        min_salary=data.get("min_salary"),
        has_equity=data.get("has_equity"),
    )


def validate_new_company(data: Mapping[str, Any]) -> List[str]:
    """Returns a list of validation error messages for a company to create."""
    errors: List[str] = []

    for f in COMPANY_REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in COMPANY_OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    _check_non_negative_int(data, "num_employees", errors)
    _check_unknown(
        data,
        COMPANY_REQUIRED_STR_FIELDS + COMPANY_OPTIONAL_STR_FIELDS + ["num_employees"],
        errors,
    )
    return errors
