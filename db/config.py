"""
Environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

_ENV_FILENAMES = (".env", ".env.local")

# Checked in order; the first non-empty value wins.
_DATABASE_URL_VARIABLES = (
    "DATABASE_URL",
    "SUPABASE_DB_URL",
    "LOCAL_DATABASE_URL",
)


def load_env_files() -> None:
    """
    Load KEY=VALUE pairs from `.env` and `.env.local` at the project root.
    Variables already present in the process environment win.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in _ENV_FILENAMES:
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.removeprefix("export ").strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite `postgres://` and `postgresql://` URLs to the psycopg driver form.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Resolve the recall store URL from DATABASE_URL, SUPABASE_DB_URL or
    LOCAL_DATABASE_URL, in that order.
    """

    load_env_files()

    for variable in _DATABASE_URL_VARIABLES:
        value = os.getenv(variable, "").strip()
        if value:
            return normalize_postgres_url(value)

    raise RuntimeError(
        "No database URL configured. Set one of: "
        + ", ".join(_DATABASE_URL_VARIABLES)
        + "."
    )
