"""
Pytest configuration and shared fixtures.
"""

import pytest
from decimal import Decimal
from typing import Any, Dict, List

from jobboard.database import Company, Job, init_database, get_session
from jobboard.logger import get_logger, reset_logger


@pytest.fixture(autouse=True)
def test_logger(tmp_path):
    """Route the global logger to a temp dir and keep the console quiet."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def engine(tmp_path):
    """Empty database with tables created."""
    engine = init_database(tmp_path / "test.db")
    yield engine
    engine.dispose()


@pytest.fixture
def seed_companies() -> List[Dict[str, Any]]:
    return [
        {"handle": "acme", "name": "Acme Corp", "num_employees": 50},
        {"handle": "beta", "name": "Beta Inc", "num_employees": 8},
        {"handle": "gamma", "name": "Gamma LLC"},
        # No jobs
        {"handle": "delta", "name": "Delta Co"},
    ]


@pytest.fixture
def seed_jobs() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "title": "Software Engineer", "salary": 120000,
         "equity": Decimal("0.05"), "company_handle": "acme"},
        {"id": 2, "title": "Mechanical Engineering Lead", "salary": 80000,
         "equity": Decimal("0"), "company_handle": "beta"},
        {"id": 3, "title": "Data Engineer", "salary": 70000,
         "equity": Decimal("0.01"), "company_handle": "acme"},
        {"id": 4, "title": "Product Manager", "salary": 130000,
         "equity": None, "company_handle": "beta"},
        {"id": 5, "title": "Senior engineer", "salary": 80000,
         "equity": Decimal("0.02"), "company_handle": "gamma"},
    ]


@pytest.fixture
def seeded_engine(engine, seed_companies, seed_jobs):
    """Database with four companies and five jobs."""
    session = get_session(engine)
    session.add_all([Company(**c) for c in seed_companies])
    session.commit()
    session.add_all([Job(**j) for j in seed_jobs])
    session.commit()
    session.close()
    return engine
