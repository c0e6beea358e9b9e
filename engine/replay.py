"""
Replay step controller.

Owns the replay playhead and drives it with an injected Scheduler. The
controller never touches indicator data; hosts read
`indicator_display_index` and hand it to the engine.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, TypeVar

from config.schema import DisplayConfig, ReplayConfig
from domain.enums import ReplayStatus
from domain.indicators.base import SeriesPoint
from domain.models import BarPoint, ReplayState
from ports.errors import ReplayError
from ports.sources import CancelToken, Scheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[ReplayState], None]


@dataclass(frozen=True)
class ReplayView:
    """Price/volume series cut to the playhead plus its time label."""
    displayed_series: list
    displayed_volume: list[SeriesPoint]
    label: str | None


def animate_candle(candle: BarPoint, progress: float) -> BarPoint:
    """
    Interpolate a forming candle.

    Bullish: wick down to the low (0-0.3), run up to the high (0.3-0.7),
    settle on the close (0.7-1). Bearish candles mirror this.
    """
    open_ = candle.open
    high = candle.high
    low = candle.low
    close = candle.close

    if close >= open_:
        if progress < 0.3:
            phase = progress / 0.3
            anim_low = open_ + (low - open_) * phase
            anim_high = open_
            anim_close = open_ + (low - open_) * phase * 0.5
        elif progress < 0.7:
            phase = (progress - 0.3) / 0.4
            anim_low = low
            anim_high = open_ + (high - open_) * phase
            anim_close = low + (high - low) * phase
        else:
            phase = (progress - 0.7) / 0.3
            anim_low = low
            anim_high = high
            anim_close = high + (close - high) * phase
    else:
        if progress < 0.3:
            phase = progress / 0.3
            anim_high = open_ + (high - open_) * phase
            anim_low = open_
            anim_close = open_ + (high - open_) * phase * 0.5
        elif progress < 0.7:
            phase = (progress - 0.3) / 0.4
            anim_high = high
            anim_low = open_ + (low - open_) * phase
            anim_close = high + (low - high) * phase
        else:
            phase = (progress - 0.7) / 0.3
            anim_high = high
            anim_low = low
            anim_close = low + (close - low) * phase

    return BarPoint(time=candle.time, open=open_, high=anim_high, low=anim_low, close=anim_close)


class ReplayController:
    """
    Replay playhead state machine.

    States:
        stopped: replay disabled, full series shown
        paused: replay enabled, not advancing
        playing: advancing one step per tick

    Example:
        >>> controller = ReplayController(scheduler)  # doctest: +SKIP
        >>> controller.set_total_steps(300)
        >>> controller.set_enabled(True)
        >>> controller.play_pause()
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: ReplayConfig | None = None,
        display: DisplayConfig | None = None,
    ):
        self._scheduler = scheduler
        self._config = config or ReplayConfig()
        self._display = display or DisplayConfig()
        self._state = ReplayState(speed=self._config.default_speed)
        self._timer: CancelToken | None = None
        self._listeners: list[Listener] = []
        self._disposed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ReplayState:
        """Snapshot of the current state."""
        return self._state.model_copy()

    @property
    def status(self) -> ReplayStatus:
        if not self._state.enabled:
            return ReplayStatus.STOPPED
        return ReplayStatus.PLAYING if self._state.playing else ReplayStatus.PAUSED

    @property
    def interval_ms(self) -> float:
        return self._config.interval_ms(self._state.speed)

    @property
    def frames_per_step(self) -> int:
        return max(1, math.floor(self.interval_ms / self._config.animation_frame_ms))

    @property
    def is_pending(self) -> bool:
        """Whether a tick or animation frame is scheduled."""
        return self._timer is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with the new state after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    def _first_step(self) -> int:
        total = self._state.total_steps
        return 1 if total > 1 else total

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_enabled(self, value: bool) -> None:
        state = self._state
        if value == state.enabled:
            return

        state.enabled = value
        state.playing = False
        if value:
            if state.current_step >= state.total_steps:
                state.current_step = self._first_step()
        else:
            state.current_step = state.total_steps
            state.animation_progress = 1.0

        logger.debug(f"Replay {'enabled' if value else 'disabled'} at step {state.current_step}")
        self._reschedule()
        self._notify()

    def play_pause(self) -> None:
        state = self._state
        if not state.enabled:
            return

        if state.total_steps <= 1:
            state.playing = False
            self._reschedule()
            self._notify()
            return

        if not state.playing and state.current_step >= state.total_steps:
            # Restart from the beginning
            state.current_step = self._first_step()
            state.animation_progress = 0.0
        if not state.playing and state.animate:
            state.animation_progress = 0.0

        state.playing = not state.playing
        self._reschedule()
        self._notify()

    def restart(self) -> None:
        state = self._state
        state.playing = False
        state.current_step = self._first_step()
        state.animation_progress = 0.0
        self._reschedule()
        self._notify()

    def seek(self, value: float) -> None:
        """Jump to a step, clamped to [1, total_steps]; no animation."""
        state = self._state
        if state.total_steps == 0:
            state.current_step = 0
        else:
            state.current_step = min(max(round(value), 1), state.total_steps)
            state.animation_progress = 1.0
        self._reschedule()
        self._notify()

    def set_speed(self, speed: float) -> None:
        """Set playback speed, clamped to the configured range."""
        if speed <= 0:
            raise ReplayError.invalid_speed(speed)
        self._state.speed = min(max(speed, self._config.min_speed), self._config.max_speed)
        self._reschedule()
        self._notify()

    def set_animate(self, value: bool) -> None:
        self._state.animate = value
        self._state.animation_progress = 1.0
        self._reschedule()
        self._notify()

    def set_animation_progress(self, value: float) -> None:
        self._state.animation_progress = value
        self._notify()

    def set_total_steps(self, total: int) -> None:
        """
        Sync with the series length.

        While replaying, appended candles shift the playhead by the same
        amount so it keeps pointing at the same logical candle.
        """
        state = self._state
        previous = state.total_steps
        if total == previous:
            return

        state.total_steps = total
        if state.enabled:
            delta = total - previous
            if total == 0:
                state.current_step = 0
            elif delta > 0:
                state.current_step = min(state.current_step + delta, total)
            else:
                state.current_step = min(state.current_step, total)
        else:
            state.current_step = total

        self._reschedule()
        self._notify()

    def dispose(self) -> None:
        """Cancel pending timers; nothing fires afterwards."""
        self._cancel()
        self._listeners.clear()
        self._disposed = True

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reschedule(self) -> None:
        self._cancel()
        if self._disposed:
            return

        state = self._state
        if not (state.enabled and state.playing):
            return
        if state.total_steps <= 1 or state.current_step >= state.total_steps:
            state.playing = False
            return

        if state.animate:
            self._timer = self._scheduler.after(self._config.animation_frame_ms, self._on_frame)
        else:
            self._timer = self._scheduler.after(self.interval_ms, self._on_tick)

    def _on_tick(self) -> None:
        self._timer = None
        state = self._state
        if self._disposed or not (state.enabled and state.playing):
            return

        next_step = state.current_step + 1
        if next_step >= state.total_steps:
            state.current_step = state.total_steps
            state.playing = False
        else:
            state.current_step = next_step

        self._reschedule()
        self._notify()

    def _on_frame(self) -> None:
        self._timer = None
        state = self._state
        if self._disposed or not (state.enabled and state.playing):
            return

        frames = self.frames_per_step
        frame = round(state.animation_progress * frames) + 1
        progress = min(1.0, frame / frames)

        if progress >= 1:
            # Commit the candle
            next_step = state.current_step + 1
            if next_step >= state.total_steps:
                state.current_step = state.total_steps
                state.playing = False
                state.animation_progress = 1.0
            else:
                state.current_step = next_step
                state.animation_progress = 0.0
        else:
            state.animation_progress = progress

        self._reschedule()
        self._notify()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def effective_index(self) -> int:
        """Number of candles shown."""
        state = self._state
        if not state.enabled:
            return state.total_steps
        if state.total_steps == 0:
            return 0
        return min(max(state.current_step, 1), state.total_steps)

    @property
    def indicator_display_index(self) -> int | None:
        """
        Replay position indicators are computed for.

        One behind the shown candle while it is still forming; None when
        replay is off.
        """
        state = self._state
        if not state.enabled:
            return None
        if state.animate and 0 < state.animation_progress < 1:
            return max(1, self.effective_index - 1)
        return self.effective_index

    @property
    def should_render_controls(self) -> bool:
        return self._state.enabled and self._state.total_steps > 0

    def displayed_series(self, series: Sequence[T]) -> list[T]:
        if not self._state.enabled:
            return list(series)
        return list(series[:self.effective_index])

    def displayed_volume(self, volume: Sequence[SeriesPoint]) -> list[SeriesPoint]:
        return self.displayed_series(volume)

    def animated_series(self, series: Sequence[T]) -> list[T]:
        """displayed_series with the newest bar replaced by its animated shape."""
        displayed = self.displayed_series(series)
        state = self._state
        if not state.enabled or not state.animate or state.animation_progress >= 1:
            return displayed
        if not displayed or not isinstance(displayed[-1], BarPoint):
            return displayed

        displayed[-1] = animate_candle(displayed[-1], state.animation_progress)
        return displayed

    def current_label(self, series: Sequence) -> str | None:
        """UTC label of the newest shown point."""
        if not self._state.enabled:
            return None
        shown = self.animated_series(series)
        if not shown:
            return None
        moment = datetime.fromtimestamp(shown[-1].time, tz=timezone.utc)
        return moment.strftime(self._display.label_format)

    def view(self, series: Sequence, volume: Sequence[SeriesPoint]) -> ReplayView:
        return ReplayView(
            displayed_series=self.animated_series(series),
            displayed_volume=self.displayed_volume(volume),
            label=self.current_label(series),
        )
