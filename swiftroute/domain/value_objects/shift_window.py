"""ShiftWindow value object — immutable (start, end) pair of wall-clock times."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class ShiftWindow:
    start: time
    end: time

    @classmethod
    def parse(cls, start: str, end: str) -> "ShiftWindow":
        """Build a window from "HH:MM" strings.

        Raises:
            ValueError: if either value is not a valid HH:MM time.
        """
        return cls(start=_parse_hhmm(start), end=_parse_hhmm(end))

    def covers(self, moment: time) -> bool:
        """Return True if *moment* falls inside the shift.

        Overnight shifts (start later than end) wrap past midnight.
        A window whose start equals its end is a 24h shift.
        """
        moment = moment.replace(second=0, microsecond=0, tzinfo=None)
        if self.start == self.end:
            return True
        if self.start < self.end:
            return self.start <= moment < self.end
        return moment >= self.start or moment < self.end

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


def _parse_hhmm(raw: str) -> time:
    value = (raw or "").strip()
    parts = value.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time {raw!r}, expected HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time {raw!r}, expected HH:MM")
    return time(hour=hour, minute=minute)
