"""Load partners.csv / orders.csv into any repository implementation."""

from __future__ import annotations

import logging
from pathlib import Path

from swiftroute.adapters.csv_loader.loader import load_orders, load_partners
from swiftroute.application.ports.order_repo import OrderRepository
from swiftroute.application.ports.partner_repo import PartnerRepository

logger = logging.getLogger(__name__)

PARTNERS_FILE = "partners.csv"
ORDERS_FILE = "orders.csv"


async def seed_from_csv(
    data_dir: Path,
    partner_repo: PartnerRepository,
    order_repo: OrderRepository,
) -> dict[str, int]:
    """Insert CSV rows that are not stored yet.

    Partners are matched by email, orders by id, so re-running is a no-op.
    The caller owns the transaction. Returns counts of inserted rows.
    """
    counts = {"partners": 0, "orders": 0}

    partners_csv = data_dir / PARTNERS_FILE
    if partners_csv.exists():
        known_emails = {p.email.lower() for p in await partner_repo.get_all()}
        for partner in load_partners(partners_csv):
            if partner.email in known_emails:
                logger.debug("Partner '%s' already exists, skipping", partner.email)
                continue
            await partner_repo.save(partner)
            known_emails.add(partner.email)
            counts["partners"] += 1
    else:
        logger.warning("No %s found in %s", PARTNERS_FILE, data_dir)

    orders_csv = data_dir / ORDERS_FILE
    if orders_csv.exists():
        for order in load_orders(orders_csv):
            if order.id and await order_repo.get_by_id(order.id) is not None:
                logger.debug("Order %s already exists, skipping", order.id)
                continue
            await order_repo.save(order)
            counts["orders"] += 1
    else:
        logger.warning("No %s found in %s", ORDERS_FILE, data_dir)

    logger.info("Seeded %d partners and %d orders from %s", counts["partners"], counts["orders"], data_dir)
    return counts
