"""Suggestion — a recommended partner for an order, not yet committed."""

from dataclasses import dataclass


@dataclass
class Suggestion:
    suggestion_made: bool
    reason: str
    suggested_partner_id: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.suggestion_made:
            self.suggested_partner_id = None

    @classmethod
    def none(cls, reason: str, source: str | None = None) -> "Suggestion":
        return cls(suggestion_made=False, reason=reason, source=source)
