"""Replay queued partner load adjustments.

Usage:
    python -m swiftroute.tools.reconcile_loads
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from swiftroute.adapters.persistence.database import dispose_engine, get_session_factory
from swiftroute.adapters.persistence.repositories import (
    SqlLoadAdjustmentRepository,
    SqlPartnerRepository,
    SqlTransaction,
)
from swiftroute.application.use_cases.reconcile_loads import ReconcileLoadsUseCase, ReconcileResult

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def reconcile() -> ReconcileResult:
    async with get_session_factory()() as session:
        uc = ReconcileLoadsUseCase(
            partner_repo=SqlPartnerRepository(session),
            adjustment_repo=SqlLoadAdjustmentRepository(session),
            tx=SqlTransaction(session),
        )
        return await uc.execute()


def main():
    parser = argparse.ArgumentParser(description="Apply pending partner load adjustments")
    parser.parse_args()

    async def run() -> ReconcileResult:
        try:
            return await reconcile()
        finally:
            await dispose_engine()

    result = asyncio.run(run())
    print(f"applied={result.applied} failed={result.failed} skipped={result.skipped}")
    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
