"""CSV loader — reads partners.csv / orders.csv into domain entities."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from swiftroute.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    parse_areas,
    parse_items,
)
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import MAX_RATING, Partner
from swiftroute.domain.value_objects.enums import OrderStatus, PartnerStatus
from swiftroute.domain.value_objects.shift_window import ShiftWindow

logger = logging.getLogger(__name__)


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Pick the delimiter (comma/semicolon/tab) most frequent in the header line."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    counts = {d: first_line.count(d) for d in (",", ";", "\t")}
    best_delim = max(counts, key=counts.get)
    if counts[best_delim] == 0:
        return csv.excel

    class DynamicDialect(csv.excel):
        delimiter = best_delim

    return DynamicDialect


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization."""
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = [
            {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            for raw_row in reader
        ]

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_partners(file_path: Path) -> list[Partner]:
    """Load the partners CSV.

    Expected columns (after normalization):
        name, email, phone, status, assigned_areas, shift_start, shift_end,
        current_load, rating; ``id`` is optional.

    Rows with a missing name/email or an unparseable shift are skipped.
    """
    partners = []
    for line_no, row in enumerate(_read_csv(file_path), start=2):
        name = row.get("name")
        email = row.get("email")
        if not name or not email:
            logger.warning("%s:%d: missing name or email, skipping", file_path.name, line_no)
            continue
        try:
            shift = ShiftWindow.parse(row.get("shift_start") or "", row.get("shift_end") or "")
        except ValueError as e:
            logger.warning("%s:%d: %s, skipping", file_path.name, line_no, e)
            continue

        try:
            status = PartnerStatus((row.get("status") or "active").lower())
        except ValueError:
            logger.warning("%s:%d: unknown status %r, using active", file_path.name, line_no, row.get("status"))
            status = PartnerStatus.ACTIVE

        partners.append(
            Partner(
                id=row.get("id"),
                name=name,
                email=email.lower(),
                phone=row.get("phone") or "",
                shift=shift,
                status=status,
                assigned_areas=parse_areas(row.get("assigned_areas") or row.get("areas")),
                current_load=max(0, _parse_int(row.get("current_load"))),
                rating=min(MAX_RATING, max(0.0, _parse_float(row.get("rating")))),
            )
        )
    logger.info("Parsed %d partners", len(partners))
    return partners


def load_orders(file_path: Path) -> list[Order]:
    """Load the orders CSV.

    Expected columns (after normalization):
        id, customer_name, customer_phone, items, area, delivery_address,
        order_value, status.

    Seeded orders carry no partner, so only ``pending`` and ``cancelled``
    are kept as-is; any other status is loaded as pending.
    """
    orders = []
    for line_no, row in enumerate(_read_csv(file_path), start=2):
        customer = row.get("customer_name")
        area = row.get("area")
        if not customer or not area:
            logger.warning("%s:%d: missing customer_name or area, skipping", file_path.name, line_no)
            continue

        status = OrderStatus.PENDING
        raw_status = row.get("status")
        if raw_status:
            try:
                parsed = OrderStatus.parse(raw_status)
            except ValueError:
                parsed = None
            if parsed == OrderStatus.CANCELLED:
                status = parsed
            elif parsed != OrderStatus.PENDING:
                logger.warning(
                    "%s:%d: status %r needs a partner, loading as pending",
                    file_path.name, line_no, raw_status,
                )

        orders.append(
            Order(
                id=row.get("id"),
                customer_name=customer,
                customer_phone=row.get("customer_phone"),
                items=parse_items(row.get("items")),
                area=area,
                delivery_address=row.get("delivery_address") or "",
                order_value=max(0.0, _parse_float(row.get("order_value"))),
                status=status,
            )
        )
    logger.info("Parsed %d orders", len(orders))
    return orders


def _parse_float(value: str | None) -> float:
    if not value:
        return 0.0
    try:
        return float(value.replace(",", ".").strip())
    except ValueError:
        return 0.0


def _parse_int(value: str | None) -> int:
    if not value:
        return 0
    try:
        # handle "4", "4.0"
        return int(float(value.replace(",", ".").strip()))
    except ValueError:
        return 0
