"""CSV column and cell normalization — BOM, trailing spaces, list and item formats."""

from __future__ import annotations

import re

from swiftroute.domain.entities.order import OrderItem

_ITEM_RE = re.compile(r"^(?P<name>.+?)\s*[xX×]\s*(?P<qty>\d+)$")


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Removes BOM characters (\\ufeff)
    - Replaces runs of whitespace with a single underscore
    - Lowercases and drops anything that is not alphanumeric or underscore
    """
    name = name.replace("\ufeff", "").strip()
    name = re.sub(r"[\s\u00a0]+", "_", name)
    name = name.lower()
    return re.sub(r"[^\w]", "", name, flags=re.UNICODE)


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_areas(raw: str | list[str] | None) -> list[str]:
    """Split 'Downtown, North End' (or '; '-separated) into area labels.

    Order and original casing are kept; blanks and duplicates are dropped.
    """
    if not raw:
        return []
    parts = raw if isinstance(raw, list) else re.split(r"[,;]", raw)
    seen: set[str] = set()
    areas = []
    for part in parts:
        label = " ".join(str(part).split())
        if label and label.lower() not in seen:
            seen.add(label.lower())
            areas.append(label)
    return areas


def parse_items(raw: str | None) -> list[OrderItem]:
    """Parse 'Pepperoni Pizza x1; Coke x4' into order items.

    An entry without an ``xN`` suffix counts as quantity 1.
    """
    if not raw:
        return []
    items = []
    for chunk in raw.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        m = _ITEM_RE.match(chunk)
        if m:
            items.append(OrderItem(name=m.group("name").strip(), quantity=max(1, int(m.group("qty")))))
        else:
            items.append(OrderItem(name=chunk, quantity=1))
    return items
