"""
app/main.py

SalesPulse API entrypoint: startup checks, logging, CORS and router wiring.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

_NUMERIC_ENV_VARS: dict[str, type] = {
    "ANOMALY_STD_THRESHOLD": float,
    "ANOMALY_MIN_SAMPLES": int,
    "ANOMALY_MAX_ALERTS": int,
    "SALES_INSERT_BATCH_SIZE": int,
    "SALES_MAX_UPLOAD_BYTES": int,
    "SHARE_DEFAULT_EXPIRY_DAYS": int,
}


def _validate_env() -> None:
    """
    Check the environment before any service or connection is created.

    Every problem is collected and reported in a single RuntimeError:
    - a Postgres URL is required (``DATABASE_URL`` or ``CLOUD_DATABASE_URL``);
    - ``LLM_ADAPTER`` must be ``openai`` or ``mock``, and ``openai`` needs a key;
    - ``SALES_COLUMN_ALIASES_JSON`` must be a JSON object when set;
    - numeric tuning variables must parse.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    if not os.getenv("DATABASE_URL", "").strip() and not os.getenv("CLOUD_DATABASE_URL", "").strip():
        errors.append("No database URL configured. Set DATABASE_URL or CLOUD_DATABASE_URL.")

    adapter = os.getenv("LLM_ADAPTER", "openai").strip().lower() or "openai"
    if adapter not in {"openai", "mock"}:
        errors.append(f"LLM_ADAPTER must be 'openai' or 'mock', got {adapter!r}.")
    elif adapter == "openai":
        if not os.getenv("LLM_API_KEY", "").strip() and not os.getenv("OPENAI_API_KEY", "").strip():
            errors.append("LLM_API_KEY or OPENAI_API_KEY is required unless LLM_ADAPTER=mock.")

    aliases = os.getenv("SALES_COLUMN_ALIASES_JSON", "").strip()
    if aliases:
        try:
            parsed = json.loads(aliases)
        except ValueError:
            errors.append("SALES_COLUMN_ALIASES_JSON is not valid JSON.")
        else:
            if not isinstance(parsed, dict):
                errors.append("SALES_COLUMN_ALIASES_JSON must be a JSON object of field -> headers.")

    for name, kind in _NUMERIC_ENV_VARS.items():
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            kind(raw)
        except ValueError:
            errors.append(f"{name} must be {'a number' if kind is float else 'an integer'}, got {raw!r}.")

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_database() -> None:
    """
    Ping the database and confirm every ORM table exists.

    Migrations are never applied here; a missing table aborts startup.
    """
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - set(sa_inspect(engine).get_table_names()))
    if missing:
        logger.critical(
            "Tables missing from the database: %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch: missing tables {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    from app.config import get_anomaly_settings, get_llm_settings

    _check_database()
    logger.info("Database connectivity and schema confirmed")

    anomaly = get_anomaly_settings()
    llm = get_llm_settings()
    logger.info(
        "Anomaly detector: threshold=%.2f sigma min_samples=%d max_alerts=%d",
        anomaly.std_threshold,
        anomaly.min_samples,
        anomaly.max_alerts,
    )
    logger.info("Insights adapter: %s (model=%s)", llm.adapter, llm.model)
    yield


def create_app() -> FastAPI:
    _validate_env()
    _configure_logging()

    from app.config import get_api_settings

    application = FastAPI(
        title="SalesPulse API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    origins = list(get_api_settings().cors_allowed_origins)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from app.api.routers import (
        ai_reports_router,
        comparison_router,
        datasets_router,
        export_router,
        goals_router,
        shares_router,
    )

    for router in (
        datasets_router,
        comparison_router,
        ai_reports_router,
        shares_router,
        goals_router,
        export_router,
    ):
        application.include_router(router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
