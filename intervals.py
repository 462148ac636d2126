"""Half-open time intervals and the single overlap test used for conflicts."""

from dataclasses import dataclass
from datetime import date, datetime, time

from errors import InvalidInterval


@dataclass(frozen=True)
class Interval:
    """A time range ``[start, end)``: includes ``start``, excludes ``end``."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if not self.start < self.end:
            raise InvalidInterval()

    @classmethod
    def on_day(cls, day: date, start: time, end: time) -> "Interval":
        """Combine a calendar day with two wall-clock times."""
        return cls(datetime.combine(day, start), datetime.combine(day, end))

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the intervals share at least one instant.

    Touching endpoints do not overlap: a booking ending at 10:00 leaves the
    room free for one starting at 10:00.
    """
    return a.start < b.end and b.start < a.end
