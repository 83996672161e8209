#!/usr/bin/env python3
"""
Import script: load documents from the legacy JSON registry file.

This script:
1. Reads the JSON file ([{id, owner, tool|app, title, versions, shared_with}])
2. Inserts documents that are not in the registry yet
3. Records every imported room in the issued room ledger

Usage:
    python -m scripts.import_legacy_json path/to/docs.json [--dry-run]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from doc_registry.core.database import close_db, get_db_context
from doc_registry.services.legacy_import import import_legacy_documents, load_legacy_file

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Import documents from the legacy JSON registry file"
    )
    parser.add_argument("path", type=Path, help="Legacy JSON registry file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be imported without modifying the database",
    )
    args = parser.parse_args()

    logger.info("=" * 70)
    logger.info("Legacy JSON Registry Import")
    logger.info("=" * 70)
    if args.dry_run:
        logger.info("DRY RUN MODE - No changes will be made")
        logger.info("=" * 70)

    try:
        records = load_legacy_file(args.path)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read {args.path}: {e}")
        return 1

    try:
        async with get_db_context() as session:
            report = await import_legacy_documents(session, records, dry_run=args.dry_run)
    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)
        return 1
    finally:
        await close_db()

    logger.info("=" * 70)
    logger.info("Import complete!")
    logger.info(f"  Documents seen: {report.documents_seen}")
    logger.info(f"  Imported: {report.documents_imported}")
    logger.info(f"  Skipped: {report.documents_skipped}")
    logger.info(f"  Rooms imported/skipped: {report.rooms_imported}/{report.rooms_skipped}")
    logger.info(f"  Shares imported/skipped: {report.shares_imported}/{report.shares_skipped}")
    logger.info("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
