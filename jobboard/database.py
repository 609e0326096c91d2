"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for job storage. The schema is declared with the
ORM so tables can be created and seeded through a session; the jobs
repository itself runs parameterized SQL on a plain connection.
"""

from pathlib import Path
from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class Company(Base):
    """Company that owns job postings."""

    __tablename__ = "companies"

    handle = Column(String(25), primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text)
    num_employees = Column(Integer)
    logo_url = Column(Text)

    __table_args__ = (
        CheckConstraint("num_employees >= 0", name="ck_companies_num_employees"),
    )


class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"

    # AUTOINCREMENT so ids are never reused after a delete
    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer)
    equity = Column(Numeric)
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("salary >= 0", name="ck_jobs_salary"),
        CheckConstraint("equity >= 0 AND equity <= 1", name="ck_jobs_equity"),
        {"sqlite_autoincrement": True},
    )


def _casefold(value):
    if value is None:
        return None
    return str(value).casefold()


def _configure_connection(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # SQLite lower() only folds ASCII
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def get_engine(db_path: Path) -> Engine:
    """
    Create an engine for the SQLite database at db_path.

    Every connection the engine opens enforces foreign keys and provides a
    Unicode-aware casefold() SQL function.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy engine
    """
    engine = create_engine(f"sqlite:///{db_path}")
    event.listen(engine, "connect", _configure_connection)
    return engine


def init_database(db_path: Path) -> Engine:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Engine bound to the initialized database
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    return engine


def get_session(engine: Engine):
    """
    Get database session.

    Args:
        engine: Engine returned by get_engine or init_database

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=engine)
    return Session()
