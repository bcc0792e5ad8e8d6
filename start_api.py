#!/usr/bin/env python3
"""
Run migrations (same process, same DATABASE_URL), then seed, then uvicorn.
Ensures tables exist before seed and app start. The memory backend skips
straight to uvicorn; the app seeds itself.
"""
import os
import sys

from oceanview.core.config import settings

if settings.STORAGE_BACKEND == "sql":
    # 1) Wait for DB
    if settings.DATABASE_URL.startswith("postgresql"):
        import wait_for_db  # noqa: F401

    # 2) Run migrations using the same settings as the app
    from alembic.config import Config
    from alembic import command

    alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(alembic_cfg, "head")

    # 3) Seed using an engine created *after* migrations
    if settings.SEED_SAMPLE_DATA:
        from oceanview.db.session import make_engine, make_session_factory
        from oceanview.seed import run as run_seed
        from oceanview.storage.sql import SqlStorage

        seed_engine = make_engine(settings.DATABASE_URL)
        run_seed(SqlStorage(make_session_factory(seed_engine)))
        seed_engine.dispose()

# 4) Start uvicorn (replace current process)
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "oceanview.main:app", "--host", "0.0.0.0", "--port", os.getenv("PORT", "8000")],
)
