"""
External ports of the engine.

The engine never fetches candles or owns a clock. Hosts provide a
CandleSource and a Scheduler; tests inject fakes.
"""

from typing import Callable, Protocol, runtime_checkable

from domain.models import Candle


@runtime_checkable
class CandleSource(Protocol):
    """
    Protocol for the candle feed the engine consumes.

    Candles are delivered newest-first. A live source may replace
    candles[0] in place as the current bar forms.
    """

    @property
    def candles(self) -> list[Candle]:
        """Current candles, descending by date."""
        ...

    @property
    def has_more(self) -> bool:
        """Whether older history can still be loaded."""
        ...

    @property
    def auto_refresh(self) -> bool:
        ...

    def load_more(self) -> None:
        """Extend the history with older candles."""
        ...


@runtime_checkable
class CancelToken(Protocol):
    """Handle returned by Scheduler.after."""

    def cancel(self) -> None:
        """Cancel the pending callback. Cancelling twice is a no-op."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Single-shot timer service used by the replay controller."""

    def after(self, ms: float, fn: Callable[[], None]) -> CancelToken:
        """Run fn once after `ms` milliseconds."""
        ...
