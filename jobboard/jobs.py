"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- One parameterized statement per operation, one transaction each.
- Raising NotFound when a statement matched no row.

Non-Responsibilities:
- No HTTP concerns.
- No SQL string building beyond wrapping fragments from jobboard.query.

Invariant:
Values, including record ids, are always bound as parameters and never
formatted into statement text.
"""

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from .exceptions import NotFound, ValidationError
from .logger import get_logger
from .query import (
    JOB_COLUMNS,
    FilterCriteria,
    build_job_search,
    compile_partial_update,
    placeholder,
)
from .schema import (
    parse_filter,
    validate_job_update,
    validate_new_company,
    validate_new_job,
)

# Logical field -> column. company_handle and id are deliberately absent.
JOB_UPDATE_COLUMNS = {
    "title": "title",
    "salary": "salary",
    "equity": "equity",
}

COMPANY_COLUMNS = "handle, name, description, num_employees, logo_url"


def _bind(value: Any) -> Any:
    # sqlite3 cannot bind Decimal
    if isinstance(value, Decimal):
        return float(value)
    return value


def _shape_job(row: Mapping[str, Any]) -> Dict[str, Any]:
    equity = row["equity"]
    return {
        "id": row["id"],
        "title": row["title"],
        "salary": row["salary"],
        "equity": Decimal(str(equity)) if equity is not None else None,
        "company_handle": row["company_handle"],
    }


def _require_id(job_id: Any) -> None:
    if not isinstance(job_id, int) or isinstance(job_id, bool):
        raise ValidationError("Invalid job id", [f"Job id must be an integer, got {job_id!r}"])


def _execute(engine: Engine, operation: str, sql: str, params: List[Any]) -> List[Dict[str, Any]]:
    """Run one statement in its own transaction and return its rows as dicts."""
    logger = get_logger()
    logger.debug(f"{operation}: {sql}", params=params)

    with engine.begin() as conn:
        result = conn.exec_driver_sql(sql, tuple(_bind(p) for p in params))
        rows = [dict(row) for row in result.mappings()]

    logger.record_statement(operation, len(rows))
    return rows


def create(engine: Engine, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a job and return it with its storage-generated id.

    Args:
        engine: Database engine
        data: {title, company_handle, salary?, equity?}

    Returns:
        {id, title, salary, equity, company_handle}

    Raises:
        ValidationError: data is invalid or company_handle does not exist
    """
    logger = get_logger()
    errors = validate_new_job(data)
    if errors:
        logger.record_error("create", "ValidationError")
        raise ValidationError("Invalid job", errors)

    sql = (
        "INSERT INTO jobs (title, salary, equity, company_handle) "
        f"VALUES ({placeholder(1)}, {placeholder(2)}, {placeholder(3)}, {placeholder(4)}) "
        f"RETURNING {JOB_COLUMNS}"
    )
    params = [data["title"], data.get("salary"), data.get("equity"), data["company_handle"]]
    try:
        rows = _execute(engine, "create", sql, params)
    except IntegrityError as e:
        logger.record_error("create", "IntegrityError")
        raise ValidationError(
            f"No company: {data['company_handle']}",
            [f"Company '{data['company_handle']}' does not exist"],
        ) from e

    job = _shape_job(rows[0])
    logger.info("Job created", job_id=job["id"], company_handle=job["company_handle"])
    return job


def find_all(
    engine: Engine,
    criteria: Optional[Union[FilterCriteria, Mapping[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    List jobs matching the optional criteria, ordered by title.

    Args:
        engine: Database engine
        criteria: FilterCriteria, or a raw mapping of
                  {title?, min_salary?, has_equity?} to validate first

    Returns:
        [{id, title, salary, equity, company_handle}, ...]

    Raises:
        ValidationError: a raw filter mapping has wrong-typed values
    """
    if not isinstance(criteria, FilterCriteria):
        criteria = parse_filter(criteria or {})

    sql, params = build_job_search(criteria)
    return [_shape_job(row) for row in _execute(engine, "find_all", sql, params)]


def get(engine: Engine, job_id: int) -> Dict[str, Any]:
    """
    Return a single job by id.

    Raises:
        NotFound: no job with that id
    """
    _require_id(job_id)
    sql = f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = {placeholder(1)}"
    rows = _execute(engine, "get", sql, [job_id])
    if not rows:
        get_logger().record_not_found("get")
        raise NotFound(f"No job: {job_id}", details={"id": job_id})
    return _shape_job(rows[0])


def find_by_company(engine: Engine, handle: str) -> List[Dict[str, Any]]:
    """
    Return all jobs of a company, ordered by title.

    An existing company without jobs yields an empty list.

    Raises:
        NotFound: no company with that handle
    """
    sql = (
        "SELECT c.handle AS company, j.id, j.title, j.salary, j.equity, j.company_handle "
        "FROM companies AS c "
        "LEFT JOIN jobs AS j ON j.company_handle = c.handle "
        f"WHERE c.handle = {placeholder(1)} "
        "ORDER BY j.title, j.id"
    )
    rows = _execute(engine, "find_by_company", sql, [handle])
    if not rows:
        get_logger().record_not_found("find_by_company")
        raise NotFound(f"No company: {handle}", details={"handle": handle})

    return [_shape_job(row) for row in rows if row["id"] is not None]


def update(engine: Engine, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Update job data with `data`.

    This is a "partial update": only the provided fields change. Data can
    include {title, salary, equity}; the owning company and id never change.

    Returns:
        {id, title, salary, equity, company_handle}

    Raises:
        InvalidChangeSet: data is empty or names a field that cannot be updated
        ValidationError: a value has the wrong type
        NotFound: no job with that id
    """
    _require_id(job_id)
    logger = get_logger()

    set_clause, values = compile_partial_update(data, JOB_UPDATE_COLUMNS)
    errors = validate_job_update(data)
    if errors:
        logger.record_error("update", "ValidationError")
        raise ValidationError("Invalid job update", errors)

    sql = (
        f"UPDATE jobs SET {set_clause} "
        f"WHERE id = {placeholder(len(values) + 1)} "
        f"RETURNING {JOB_COLUMNS}"
    )
    rows = _execute(engine, "update", sql, [*values, job_id])
    if not rows:
        logger.record_not_found("update")
        logger.warning("Update matched no job", job_id=job_id)
        raise NotFound(f"No job: {job_id}", details={"id": job_id})

    logger.info("Job updated", job_id=job_id, fields=list(data))
    return _shape_job(rows[0])


def remove(engine: Engine, job_id: int) -> None:
    """
    Delete given job from database.

    Raises:
        NotFound: no job with that id
    """
    _require_id(job_id)
    logger = get_logger()

    sql = f"DELETE FROM jobs WHERE id = {placeholder(1)} RETURNING id"
    rows = _execute(engine, "remove", sql, [job_id])
    if not rows:
        logger.record_not_found("remove")
        logger.warning("Delete matched no job", job_id=job_id)
        raise NotFound(f"No job: {job_id}", details={"id": job_id})

    logger.info("Job deleted", job_id=job_id)


def create_company(engine: Engine, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Insert a company so jobs can reference it.

    Raises:
        ValidationError: data is invalid or the handle/name is already taken
    """
    logger = get_logger()
    errors = validate_new_company(data)
    if errors:
        logger.record_error("create_company", "ValidationError")
        raise ValidationError("Invalid company", errors)

    slots = ", ".join(placeholder(i) for i in range(1, 6))
    sql = f"INSERT INTO companies ({COMPANY_COLUMNS}) VALUES ({slots}) RETURNING {COMPANY_COLUMNS}"
    params = [
        data["handle"],
        data["name"],
        data.get("description"),
        data.get("num_employees"),
        data.get("logo_url"),
    ]
    try:
        rows = _execute(engine, "create_company", sql, params)
    except IntegrityError as e:
        logger.record_error("create_company", "IntegrityError")
        raise ValidationError(
            f"Duplicate company: {data['handle']}",
            [f"Company '{data['handle']}' or name '{data['name']}' already exists"],
        ) from e

    logger.info("Company created", handle=data["handle"])
    return rows[0]
