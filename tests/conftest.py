"""Shared fixtures: candle builders and a manually advanced scheduler."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from domain.models import Candle

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_candles(count: int, interval: timedelta = timedelta(days=1), volume: float | None = 1000.0) -> list[Candle]:
    """Build `count` candles, newest-first, like a candle source delivers them."""
    candles = []
    for i in range(count):
        close = 100 + i * 0.5 + math.sin(i / 3) * 2
        open_ = close - math.cos(i / 2)
        candles.append(Candle(
            date=START + interval * i,
            open=open_,
            high=max(open_, close) + 1,
            low=min(open_, close) - 1,
            close=close,
            volume=volume,
        ))
    return list(reversed(candles))


@dataclass
class FakeToken:
    due: float
    seq: int
    fn: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Scheduler driven by advance(); fires due callbacks in order."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._pending: list[FakeToken] = []

    def after(self, ms: float, fn: Callable[[], None]) -> FakeToken:
        self._seq += 1
        token = FakeToken(due=self.now + ms, seq=self._seq, fn=fn)
        self._pending.append(token)
        return token

    @property
    def pending(self) -> list[FakeToken]:
        return [t for t in self._pending if not t.cancelled]

    def advance(self, ms: float) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            token = min(due, key=lambda t: (t.due, t.seq))
            self._pending.remove(token)
            self.now = token.due
            token.fn()
        self.now = target


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def candles_25():
    return make_candles(25)


@pytest.fixture
def candles_300():
    return make_candles(300)
