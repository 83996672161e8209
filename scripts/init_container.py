#!/usr/bin/env python3
"""
Init container script for the Document Registry.

Waits for the database to accept connections, then applies migrations
before the API starts.

Usage:
    python -m scripts.init_container

Exit codes:
    0 - Success
    1 - Database unreachable or migration failure
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from doc_registry.config import get_settings
from doc_registry.core.database import build_engine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [init] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("init_container")

CONNECT_ATTEMPTS = 30
CONNECT_DELAY_SECONDS = 2.0


async def wait_for_database() -> bool:
    """
    Poll the database until it answers a trivial query.

    Returns:
        True once connected, False after CONNECT_ATTEMPTS failures
    """
    settings = get_settings()
    engine = build_engine(settings.database_url, settings)
    try:
        for attempt in range(1, CONNECT_ATTEMPTS + 1):
            try:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database is reachable")
                return True
            except (OperationalError, OSError) as e:
                logger.info(
                    f"Database not ready (attempt {attempt}/{CONNECT_ATTEMPTS}): {e}"
                )
                await asyncio.sleep(CONNECT_DELAY_SECONDS)
    finally:
        await engine.dispose()

    logger.error("Database did not become reachable")
    return False


def run_migrations() -> bool:
    """
    Run alembic migrations.

    Returns:
        True if migrations succeeded, False otherwise
    """
    logger.info("Running database migrations...")

    project_dir = Path(__file__).parent.parent

    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=project_dir,
            capture_output=True,
            text=True,
            check=True,
            timeout=300,
        )

        if result.stdout:
            for line in result.stdout.strip().split("\n"):
                if line.strip():
                    logger.info(f"alembic: {line}")

        logger.info("Database migrations completed successfully")
        return True

    except subprocess.TimeoutExpired:
        logger.error("Migration timed out after 5 minutes")
        return False

    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed with exit code {e.returncode}")
        if e.stderr:
            for line in e.stderr.strip().split("\n"):
                logger.error(f"alembic: {line}")
        return False

    except FileNotFoundError:
        logger.error("alembic command not found - ensure it's installed")
        return False


def main() -> int:
    """
    Main entry point for init container.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    logger.info("=" * 60)
    logger.info("Document Registry Init Container Starting")
    logger.info("=" * 60)

    logger.info("Step 1: Waiting for Database")
    logger.info("-" * 40)
    if not asyncio.run(wait_for_database()):
        logger.error("FAILED: Database unreachable - aborting startup")
        return 1

    logger.info("Step 2: Running Database Migrations")
    logger.info("-" * 40)
    if not run_migrations():
        logger.error("FAILED: Database migrations failed - aborting startup")
        return 1

    logger.info("=" * 60)
    logger.info("Init Container Completed Successfully")
    logger.info("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
