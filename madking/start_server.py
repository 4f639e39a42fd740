# madking/start_server.py
"""
Main runner for the Mad King character-sheet API.

This script makes sure the database schema is in place (Alembic upgrade,
falling back to create_all()), optionally loads the seed catalogs, and then
serves the FastAPI app with uvicorn.
"""
import logging
import os
from pathlib import Path

import uvicorn
from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig

# --- Setup Logging ---
logging.basicConfig(
    level=os.environ.get("MADKING_LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
)
logger = logging.getLogger("madking.startup")

PKG_PATH = Path(__file__).resolve().parent


# --- Database Migration Function ---
def run_migrations(mode: str) -> None:
    """
    Brings the database schema up to date.

    Args:
        mode (str): 'auto' tries Alembic and falls back to create_all(),
            'migrate' fails on any Alembic error, 'none' skips initialisation.
    """
    from madking import database
    from madking.modules.catalog_pkg import models as catalog_models  # noqa: F401
    from madking.modules.character_pkg import models as character_models  # noqa: F401

    logger.info(f"--- Initialising database (Mode: {mode}) ---")
    if mode == "none":
        logger.info("Skipping database initialisation as per mode=none.")
        return

    try:
        alembic_ini_path = PKG_PATH / "alembic.ini"
        script_location = PKG_PATH / "migrations"
        if not alembic_ini_path.exists() or not script_location.exists():
            raise FileNotFoundError(f"Alembic configuration not found under {PKG_PATH}")

        cfg = AlembicConfig(str(alembic_ini_path))
        cfg.set_main_option("script_location", str(script_location))
        cfg.set_main_option("sqlalchemy.url", database.DATABASE_URL)

        logger.info(f"Running alembic upgrade head on {database.DATABASE_URL}...")
        alembic_command.upgrade(cfg, "head")
        logger.info("Alembic upgrade complete.")

    except Exception as e:
        logger.exception(f"Alembic migration failed: {e}")
        if mode == "migrate":
            raise RuntimeError("Migration failed in 'migrate' mode.") from e

        logger.warning("Falling back to create_all()...")
        database.Base.metadata.create_all(bind=database.engine)
        logger.info("create_all() successful.")


def main() -> None:
    """
    1. Initialises the database.
    2. Seeds the catalogs if MADKING_SEED_ON_START is set.
    3. Serves the API (unless MADKING_RUN_ONCE is set).
    """
    migration_mode = os.environ.get("MADKING_DB_INIT", "auto").lower()
    run_migrations(migration_mode)

    if os.environ.get("MADKING_SEED_ON_START"):
        from madking.seeds import load_seeds
        load_seeds()

    if os.environ.get("MADKING_RUN_ONCE"):
        logger.info("MADKING_RUN_ONCE is set. Exiting after startup.")
        return

    host = os.environ.get("MADKING_HOST", "127.0.0.1")
    port = int(os.environ.get("MADKING_PORT", "8000"))
    logger.info(f"--- Mad King API listening on {host}:{port} ---")
    uvicorn.run("madking.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
