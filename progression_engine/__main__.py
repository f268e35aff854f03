"""Prepare a database for the progression engine: create tables and seed achievements"""
import argparse
import asyncio
import logging

from progression_engine.config import configure_logging, validate_config
from progression_engine.db.connection import db
from progression_engine.db.schema import create_schema
from progression_engine.gamification.catalog import seed_achievements

logger = logging.getLogger(__name__)


async def main(include_catalog: bool = False, skip_seed: bool = False) -> None:
    """Create schema and seed the achievement catalog"""
    validate_config()

    logger.info("Initializing database connection pool...")
    await db.init_pool()
    try:
        await create_schema(include_catalog=include_catalog)

        if not skip_seed:
            count = await seed_achievements()
            logger.info(f"✅ {count} achievements in catalog")
    finally:
        await db.close_pool()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create progression tables and seed the achievement catalog")
    parser.add_argument(
        "--with-catalog-tables",
        action="store_true",
        help="Also create the challenge catalog tables (local/test databases)"
    )
    parser.add_argument("--skip-seed", action="store_true", help="Only create tables")

    args = parser.parse_args()

    configure_logging()
    asyncio.run(main(include_catalog=args.with_catalog_tables, skip_seed=args.skip_seed))
