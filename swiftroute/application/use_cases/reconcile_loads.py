"""ReconcileLoadsUseCase — replay queued partner load adjustments."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from swiftroute.application.ports.load_adjustment_repo import LoadAdjustmentRepository
from swiftroute.application.ports.partner_repo import PartnerRepository
from swiftroute.application.ports.transaction import TransactionPort

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    applied: int = 0
    failed: int = 0
    skipped: int = 0


class ReconcileLoadsUseCase:
    """Applies every pending LoadAdjustment, one transaction per adjustment."""

    def __init__(
        self,
        partner_repo: PartnerRepository,
        adjustment_repo: LoadAdjustmentRepository,
        tx: TransactionPort,
    ):
        self._partners = partner_repo
        self._adjustments = adjustment_repo
        self._tx = tx

    async def execute(self) -> ReconcileResult:
        pending = await self._adjustments.get_pending()
        logger.info("Reconciling %d pending load adjustments", len(pending))

        result = ReconcileResult()
        for adj in pending:
            # Only releases are ever queued; anything else is retired untouched.
            skip = adj.delta >= 0
            if skip:
                logger.warning("Skipping non-negative adjustment %s (delta=%d)", adj.id, adj.delta)
            try:
                for _ in range(0 if skip else -adj.delta):
                    await self._partners.decrement_load(adj.partner_id)
                await self._adjustments.mark_applied(adj.id)
                await self._tx.commit()
            except Exception:
                logger.exception("Failed to apply load adjustment %s", adj.id)
                await self._tx.rollback()
                result.failed += 1
                continue
            if skip:
                result.skipped += 1
            else:
                result.applied += 1

        logger.info(
            "Reconcile complete: %d applied, %d failed, %d skipped",
            result.applied, result.failed, result.skipped,
        )
        return result
