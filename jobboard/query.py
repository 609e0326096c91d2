"""
Query construction for the jobs table.

Two pure builders live here:

- compile_job_filter: optional search criteria -> WHERE clause + params
- compile_partial_update: change set + column allow-list -> SET clause + values

Neither touches the database. Placeholders use SQLite's numbered form
(?1, ?2, ...) so the fragments can be spliced into a larger statement and the
caller can keep appending parameters after them.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple

from .exceptions import InvalidChangeSet, ValidationError

LIKE_ESCAPE = "\\"

JOB_COLUMNS = "id, title, salary, equity, company_handle"


def placeholder(position: int) -> str:
    """Numbered positional placeholder, 1-based."""
    return f"?{position}"


@dataclass(frozen=True)
class FilterCriteria:
    """Optional search constraints for listing jobs.

    None means "not supplied". has_equity=False is treated exactly like None.
    Values of the wrong type raise ValidationError instead of being ignored.
    """

    title: Optional[str] = None
    min_salary: Optional[int] = None
    has_equity: Optional[bool] = None

    def __post_init__(self):
        errors = []
        if self.title is not None and not isinstance(self.title, str):
            errors.append(f"title must be a string, got {self.title!r}")
        if self.min_salary is not None and (
            not isinstance(self.min_salary, int) or isinstance(self.min_salary, bool)
        ):
            errors.append(f"min_salary must be an integer, got {self.min_salary!r}")
        if self.has_equity is not None and not isinstance(self.has_equity, bool):
            errors.append(f"has_equity must be true or false, got {self.has_equity!r}")
        if errors:
            raise ValidationError("Invalid job filter", errors)


def _contains_pattern(fragment: str) -> str:
    escaped = (
        fragment.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


# Each builder returns (sql template, params) or None when the value does not
# constrain anything. "{}" in the template is replaced by a numbered placeholder
# per param.
Predicate = Optional[Tuple[str, List[Any]]]


def _title_contains(title: str) -> Predicate:
    return f"casefold(title) LIKE casefold({{}}) ESCAPE '{LIKE_ESCAPE}'", [_contains_pattern(title)]


def _salary_at_least(min_salary: int) -> Predicate:
    return "salary >= {}", [min_salary]


def _has_equity(has_equity: bool) -> Predicate:
    # False does not mean "no equity"; it means "don't filter on equity".
    if not has_equity:
        return None
    return "equity > 0", []


# Order matters: predicates and params are emitted in this order.
JOB_FILTERS: Tuple[Tuple[str, Callable[[Any], Predicate]], ...] = (
    ("title", _title_contains),
    ("min_salary", _salary_at_least),
    ("has_equity", _has_equity),
)


def compile_job_filter(criteria: FilterCriteria) -> Tuple[str, List[Any]]:
    """
    Compile search criteria into a WHERE clause.

    Args:
        criteria: Optional title fragment, minimum salary and equity flag

    Returns:
        Tuple of (where_clause, params). where_clause includes the WHERE
        keyword, or is "" when no criterion is active.

    Examples:
        >>> compile_job_filter(FilterCriteria(title="eng", has_equity=True))
        ("WHERE casefold(title) LIKE casefold(?1) ESCAPE '\\\\' AND equity > 0", ['%eng%'])

        >>> compile_job_filter(FilterCriteria(has_equity=False))
        ('', [])
    """
    where_parts: List[str] = []
    params: List[Any] = []

    for name, build in JOB_FILTERS:
        value = getattr(criteria, name)
        if value is None:
            continue
        predicate = build(value)
        if predicate is None:
            continue

        template, values = predicate
        slots = [placeholder(len(params) + i) for i in range(1, len(values) + 1)]
        where_parts.append(template.format(*slots))
        params.extend(values)

    if not where_parts:
        return "", params
    return "WHERE " + " AND ".join(where_parts), params


def build_job_search(criteria: FilterCriteria) -> Tuple[str, List[Any]]:
    """Full SELECT for listing jobs, ordered by title with id as tie-breaker."""
    where_clause, params = compile_job_filter(criteria)
    parts = [f"SELECT {JOB_COLUMNS}", "FROM jobs"]
    if where_clause:
        parts.append(where_clause)
    parts.append("ORDER BY title, id")
    return " ".join(parts), params


def compile_partial_update(
    change_set: Mapping[str, Any],
    column_map: Mapping[str, str],
) -> Tuple[str, List[Any]]:
    """
    Compile a partial update into a SET clause.

    Args:
        change_set: Logical field name -> new value, in the order the
                    assignments should be written.
        column_map: Allow-list of logical field names mapped to storage
                    column names. Keys outside it are rejected.

    Returns:
        Tuple of (set_clause, values). Placeholders run from ?1 to ?N; the
        caller binds the record id as ?N+1.

    Raises:
        InvalidChangeSet: change_set is empty or has keys missing from column_map

    Examples:
        >>> compile_partial_update({"salary": 1, "equity": 0.1},
        ...                        {"equity": "equity", "salary": "salary"})
        ('"salary"=?1, "equity"=?2', [1, 0.1])
    """
    if not change_set:
        raise InvalidChangeSet("No data to update")

    unknown = [key for key in change_set if key not in column_map]
    if unknown:
        raise InvalidChangeSet(
            f"Cannot update field(s): {', '.join(unknown)}",
            details={"unknown": unknown, "allowed": sorted(column_map)},
        )

    assignments: List[str] = []
    values: List[Any] = []
    for position, (key, value) in enumerate(change_set.items(), start=1):
        assignments.append(f'"{column_map[key]}"={placeholder(position)}')
        values.append(value)

    return ", ".join(assignments), values
