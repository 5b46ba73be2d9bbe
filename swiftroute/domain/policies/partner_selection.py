"""PartnerSelectionPolicy — deterministic best-fit partner for an order."""

from __future__ import annotations

from datetime import time

from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import MAX_CONCURRENT_ORDERS, Partner
from swiftroute.domain.entities.suggestion import Suggestion

RULES_SOURCE = "rules"


def rank_candidates(candidates: list[Partner], moment: time) -> list[Partner]:
    """Order eligible partners from best to worst.

    Sort key: current_load ASC, on-shift first, rating DESC, id ASC.
    """
    return sorted(
        candidates,
        key=lambda p: (
            p.current_load,
            not p.is_on_shift(moment),
            -p.rating,
            p.id or "",
        ),
    )


def select_partner(
    order: Order,
    candidates: list[Partner],
    moment: time,
    ceiling: int = MAX_CONCURRENT_ORDERS,
) -> Suggestion:
    """Pure function: pick a partner for *order* or explain why none fits.

    Rules, in order:
      1. Only active partners are considered.
      2. The partner's assigned areas must include the order's area.
      3. A partner at or above *ceiling* concurrent orders is excluded.
      4. Among the rest, lowest load wins; ties go to partners on shift at
         *moment*, then higher rating, then id for determinism.
    """
    active = [p for p in candidates if p.is_active()]
    if not active:
        return Suggestion.none(
            "No active partners are currently available for assignment.",
            source=RULES_SOURCE,
        )

    in_area = [p for p in active if p.covers_area(order.area)]
    if not in_area:
        return Suggestion.none(
            f"No active partners cover the {order.area} area.",
            source=RULES_SOURCE,
        )

    with_capacity = [p for p in in_area if p.has_capacity(ceiling)]
    if not with_capacity:
        return Suggestion.none(
            f"All partners covering {order.area} are at maximum load ({ceiling}).",
            source=RULES_SOURCE,
        )

    chosen = rank_candidates(with_capacity, moment)[0]
    shift_note = (
        f"on shift ({chosen.shift})"
        if chosen.is_on_shift(moment)
        else f"outside shift ({chosen.shift}) but the least loaded option"
    )
    return Suggestion(
        suggestion_made=True,
        suggested_partner_id=chosen.id,
        reason=(
            f"{chosen.name} covers {order.area} with load "
            f"{chosen.current_load}/{ceiling} and is {shift_note}."
        ),
        source=RULES_SOURCE,
    )
