"""
Environment-driven configuration.

Values come from the process environment, optionally seeded from a .env file
in the working directory. Command-line flags override them.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/jobs.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"


def load_env() -> None:
    """Load .env from project root if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True)
class Settings:
    db_path: Path
    log_level: str
    log_dir: Path


def get_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    return Settings(
        db_path=Path(os.getenv("JOBBOARD_DB_PATH", DEFAULT_DB_PATH)),
        log_level=os.getenv("JOBBOARD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        log_dir=Path(os.getenv("JOBBOARD_LOG_DIR", DEFAULT_LOG_DIR)),
    )
