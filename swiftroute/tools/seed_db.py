"""Load partners.csv and orders.csv into PostgreSQL.

Usage:
    python -m swiftroute.tools.seed_db
    python -m swiftroute.tools.seed_db --data-dir data
    python -m swiftroute.tools.seed_db --drop  # drop existing data first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from swiftroute.adapters.csv_loader.seeder import seed_from_csv
from swiftroute.adapters.persistence.database import dispose_engine, get_session_factory
from swiftroute.adapters.persistence.models import (
    AssignmentModel,
    LoadAdjustmentModel,
    OrderModel,
    PartnerModel,
)
from swiftroute.adapters.persistence.repositories import SqlOrderRepository, SqlPartnerRepository

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def _drop_data(session: AsyncSession) -> None:
    """Empty every table, children before parents."""
    for model in [LoadAdjustmentModel, AssignmentModel, OrderModel, PartnerModel]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(data_dir: Path, drop: bool = False) -> dict[str, int]:
    """Insert CSV partners and orders that are not stored yet; returns inserted counts."""
    async with get_session_factory()() as session:
        if drop:
            await _drop_data(session)
        counts = await seed_from_csv(
            data_dir, SqlPartnerRepository(session), SqlOrderRepository(session)
        )
        await session.commit()

        for label, model in (("partners", PartnerModel), ("orders", OrderModel)):
            total = (await session.execute(select(func.count()).select_from(model))).scalar_one()
            logger.info("%s: %d inserted, %d total", label, counts[label], total)
    return counts


def main():
    parser = argparse.ArgumentParser(description="Seed SwiftRoute database from CSV files")
    parser.add_argument(
        "--data-dir", type=str, default="data",
        help="Directory containing partners.csv and orders.csv (default: data)",
    )
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    args = parser.parse_args()

    data_dir = Path(args.data_dir)
    if not data_dir.exists():
        logger.error("Data directory not found: %s", data_dir)
        sys.exit(1)

    async def run():
        try:
            await seed(data_dir, drop=args.drop)
        finally:
            await dispose_engine()

    asyncio.run(run())


if __name__ == "__main__":
    main()
