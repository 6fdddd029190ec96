"""
db/config.py

Environment loading and Postgres URL resolution shared by the API, the
Streamlit dashboard and Alembic.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILES = (".env", ".env.local")

_DRIVER_PREFIXES = ("postgres://", "postgresql://")
_HOSTED_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})


def load_env_files(root: Path = PROJECT_ROOT) -> None:
    """
    Read ``KEY=VALUE`` lines from the project env files into ``os.environ``.

    Variables already set in the process win over file values. Blank lines,
    ``#`` comments and an optional ``export`` prefix are accepted.
    """

    for filename in ENV_FILES:
        env_path = root / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = (part.strip() for part in line.split("=", 1))
            if key:
                os.environ.setdefault(key, value.strip("\"'"))


def normalize_postgres_url(url: str) -> str:
    """Rewrite bare postgres schemes to the psycopg 3 driver."""
    url = url.strip()
    for prefix in _DRIVER_PREFIXES:
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Pick the database URL: ``DATABASE_URL`` first, then ``CLOUD_DATABASE_URL``
    when ``ENVIRONMENT`` names a hosted deployment, then ``LOCAL_DATABASE_URL``.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    candidates = ["DATABASE_URL"]
    if environment in _HOSTED_ENVIRONMENTS:
        candidates.append("CLOUD_DATABASE_URL")
    candidates.append("LOCAL_DATABASE_URL")

    for name in candidates:
        value = os.getenv(name, "").strip()
        if value:
            return normalize_postgres_url(value)

    raise RuntimeError(f"No database URL configured. Set one of: {', '.join(candidates)}.")
