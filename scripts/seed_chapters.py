#!/usr/bin/env python
"""
Seed the chapters table from a JSON file.

Usage:
    python scripts/seed_chapters.py data.json [--clear]
"""
import asyncio
import json
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chapter_api.common.cache.client import CacheManager
from chapter_api.common.config.logging_config import configure_logging
from chapter_api.common.config.settings import get_settings
from chapter_api.common.database.connection import DatabaseManager
from chapter_api.features.chapters.repositories.chapter_repository import ChapterRepository
from chapter_api.features.chapters.services import cache_keys
from chapter_api.features.chapters.services.chapter_service import ChapterService
from loguru import logger


def load_records(path: Path) -> list:
    """Read the seed file, which must hold a JSON array."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("Seed data must be a JSON array")
    return data


async def main(data_file: Path, clear: bool = False) -> int:
    """
    Insert every record in ``data_file``.

    Args:
        data_file: JSON file holding an array of chapters
        clear: Delete all existing chapters first

    Returns:
        Process exit code
    """
    settings = get_settings()
    configure_logging(settings)

    records = load_records(data_file)
    logger.info(f"Loaded {len(records)} records from {data_file}")

    database = DatabaseManager.from_settings(settings)
    cache = CacheManager(settings)

    try:
        await database.create_pool()
        await cache.connect()

        repository = ChapterRepository(database)
        await repository.ensure_schema()
        service = ChapterService(repository, cache, settings)

        if clear:
            removed = await repository.delete_all()
            logger.info(f"Cleared {removed} existing chapters")

        result = await service.create_chapters(records)
        # A reseed changes everything, including the aggregates
        await service.invalidate(
            cache_keys.WRITE_INVALIDATION_PATTERNS + cache_keys.AGGREGATE_INVALIDATION_PATTERNS
        )

        print("\n" + "=" * 80)
        print("SEEDING RESULTS")
        print("=" * 80)
        print(f"  Created: {len(result.data.successful)}")
        print(f"  Failed:  {len(result.data.failed)}")

        for failure in result.data.failed:
            print(f"  [{failure.index}] {failure.error}")

        return 0 if result.success else 1

    finally:
        await cache.disconnect()
        await database.close_pool()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed the chapters table from a JSON file")
    parser.add_argument("data_file", type=Path, help="JSON file holding an array of chapters")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete existing chapters before seeding"
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.data_file, clear=args.clear)))
