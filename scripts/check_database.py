#!/usr/bin/env python3
"""
scripts/check_database.py — Connectivity check for the portal's MongoDB.

Acquires the shared database through the same accessor request handlers use
and prints a health report. The connection string is never printed.

Usage:
    python -m scripts.check_database                 # health report
    python -m scripts.check_database --collections   # + document counts
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from core.database import ConnectionManager, get_manager
from core.models import Collections

logger = logging.getLogger("check_database")


async def count_collections(manager: ConnectionManager) -> dict[str, int | None]:
    """Return ``{collection: document count}``; ``None`` where counting failed."""
    db = await manager.acquire_database()
    counts: dict[str, int | None] = {}
    if db is None:
        return counts
    for name in Collections.all():
        try:
            counts[name] = await db[name].estimated_document_count()
        except Exception as exc:
            logger.error("Counting %s failed: %s", name, exc)
            counts[name] = None
    return counts


async def run(show_collections: bool, manager: ConnectionManager | None = None) -> int:
    """Print the health report; return the process exit code."""
    manager = manager or get_manager()
    try:
        report = await manager.health()
        print(json.dumps(report.model_dump(mode="json"), indent=2))
        if report.ok and show_collections:
            counts = await count_collections(manager)
            print(json.dumps(counts, indent=2))
        return 0 if report.ok else 1
    finally:
        await manager.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check the MongoDB connection.")
    parser.add_argument("--collections", action="store_true",
                        help="also print document counts per portal collection")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )
    return asyncio.run(run(args.collections))


if __name__ == "__main__":
    sys.exit(main())
