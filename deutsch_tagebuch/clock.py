import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime.datetime: ...

    def today(self) -> datetime.date: ...


class SystemClock:
    """Server local time. Calendar days follow the server's timezone."""

    def now(self) -> datetime.datetime:
        return datetime.datetime.now()

    def today(self) -> datetime.date:
        return self.now().date()


class FixedClock:
    """A clock frozen at a given instant; `advance` moves it forward."""

    def __init__(self, now: datetime.datetime) -> None:
        self._now = now

    def now(self) -> datetime.datetime:
        return self._now

    def today(self) -> datetime.date:
        return self._now.date()

    def advance(self, **kwargs: float) -> None:
        self._now = self._now + datetime.timedelta(**kwargs)
