from datetime import datetime


class SystemClock:
    """Wall-clock time in the service's single local timezone."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, delta) -> None:
        self.moment = self.moment + delta
