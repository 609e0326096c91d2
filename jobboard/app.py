import argparse
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from . import jobs
from .database import get_engine, init_database
from .env import get_settings, load_env
from .exceptions import InvalidChangeSet, NotFound, ValidationError
from .logger import get_logger


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=_json_default))


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {raw!r}")


def _parse_equity(raw: str) -> Decimal:
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"expected a decimal number, got {raw!r}")


def _supplied(args: argparse.Namespace, *names: str) -> Dict[str, Any]:
    """Options the user actually passed, in the order given by names."""
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def _engine(args: argparse.Namespace):
    db_path = Path(args.db)
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path} (run 'init-db' first)")
    return get_engine(db_path)


def cmd_init_db(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    init_database(db_path)
    print(f"Initialized database at {db_path}")


def cmd_add_company(args: argparse.Namespace) -> None:
    data = _supplied(args, "handle", "name", "description", "num_employees", "logo_url")
    company = jobs.create_company(_engine(args), data)
    _emit({"company": company})


def cmd_create(args: argparse.Namespace) -> None:
    data = _supplied(args, "title", "salary", "equity", "company_handle")
    job = jobs.create(_engine(args), data)
    _emit({"job": job})


def cmd_list(args: argparse.Namespace) -> None:
    filters = _supplied(args, "title", "min_salary", "has_equity")
    _emit({"jobs": jobs.find_all(_engine(args), filters)})


def cmd_get(args: argparse.Namespace) -> None:
    _emit({"job": jobs.get(_engine(args), args.id)})


def cmd_company(args: argparse.Namespace) -> None:
    _emit({"jobs": jobs.find_by_company(_engine(args), args.handle)})


def cmd_update(args: argparse.Namespace) -> None:
    data = _supplied(args, "title", "salary", "equity")
    _emit({"job": jobs.update(_engine(args), args.id, data)})


def cmd_delete(args: argparse.Namespace) -> None:
    jobs.remove(_engine(args), args.id)
    _emit({"deleted": args.id})


def build_parser(default_db: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobboard", description="Jobs resource CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", default=default_db, help=f"Path to SQLite database (default: {default_db})")

    subparsers = parser.add_subparsers(dest="command")

    ini = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    ini.set_defaults(func=cmd_init_db)

    com = subparsers.add_parser("add-company", help="Add a company that jobs can belong to")
    com.add_argument("--handle", required=True, help="Company handle")
    com.add_argument("--name", required=True, help="Company name")
    com.add_argument("--description", help="Free-text description")
    com.add_argument("--num-employees", type=int, help="Number of employees")
    com.add_argument("--logo-url", help="Logo URL")
    com.set_defaults(func=cmd_add_company)

    cre = subparsers.add_parser("create", help="Create a job")
    cre.add_argument("--title", required=True, help="Job title")
    cre.add_argument("--company-handle", required=True, help="Handle of the owning company")
    cre.add_argument("--salary", type=int, help="Yearly salary")
    cre.add_argument("--equity", type=_parse_equity, help="Equity between 0 and 1")
    cre.set_defaults(func=cmd_create)

    lst = subparsers.add_parser("list", help="List jobs, optionally filtered")
    lst.add_argument("--title", help="Case-insensitive title fragment")
    lst.add_argument("--min-salary", type=int, help="Minimum salary (inclusive)")
    lst.add_argument("--has-equity", type=_parse_bool, help="true: only jobs with equity > 0")
    lst.set_defaults(func=cmd_list)

    get = subparsers.add_parser("get", help="Show one job")
    get.add_argument("--id", type=int, required=True, help="Job id")
    get.set_defaults(func=cmd_get)

    byc = subparsers.add_parser("company", help="List the jobs of a company")
    byc.add_argument("--handle", required=True, help="Company handle")
    byc.set_defaults(func=cmd_company)

    upd = subparsers.add_parser("update", help="Change title, salary or equity of a job")
    upd.add_argument("--id", type=int, required=True, help="Job id")
    upd.add_argument("--title", help="New title")
    upd.add_argument("--salary", type=int, help="New salary")
    upd.add_argument("--equity", type=_parse_equity, help="New equity")
    upd.set_defaults(func=cmd_update)

    dlt = subparsers.add_parser("delete", help="Delete a job")
    dlt.add_argument("--id", type=int, required=True, help="Job id")
    dlt.set_defaults(func=cmd_delete)

    return parser


def main(argv: Optional[list] = None) -> int:
    load_env()
    settings = get_settings()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)

    parser = build_parser(str(settings.db_path))
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        args.func(args)
    except NotFound as e:
        print(f"Not found: {e.message}", file=sys.stderr)
        return 1
    except (ValidationError, InvalidChangeSet) as e:
        print(f"Invalid input: {e.message}", file=sys.stderr)
        for detail in (e.details or {}).get("errors", []):
            print(f" - {detail}", file=sys.stderr)
        return 2
    finally:
        logger.debug("Command finished", command=args.command, metrics=logger.get_metrics())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
