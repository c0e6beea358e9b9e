"""
Tests for the replay controller driven by a fake scheduler.
"""

import asyncio

import pytest

from config.schema import ReplayConfig
from domain.enums import ReplayStatus
from domain.indicators.base import SeriesPoint
from domain.models import BarPoint
from engine.replay import ReplayController, animate_candle
from engine.scheduler import AsyncioScheduler
from ports.errors import ReplayError

JAN_1_2024 = 1_704_067_200


def bars(count):
    return [
        BarPoint(time=JAN_1_2024 + i * 3600, open=10, high=12, low=9, close=11)
        for i in range(count)
    ]


@pytest.fixture
def controller(scheduler):
    controller = ReplayController(scheduler)
    controller.set_total_steps(10)
    yield controller
    controller.dispose()


class TestEnableDisable:
    """Entering and leaving replay."""

    def test_starts_stopped(self, controller):
        assert controller.status == ReplayStatus.STOPPED
        assert controller.state.current_step == 10
        assert controller.indicator_display_index is None

    def test_enable_rewinds(self, controller):
        controller.set_enabled(True)

        assert controller.status == ReplayStatus.PAUSED
        assert controller.state.current_step == 1
        assert controller.effective_index == 1
        assert controller.should_render_controls

    def test_disable_shows_everything(self, controller):
        controller.set_enabled(True)
        controller.seek(4)
        controller.set_enabled(False)

        assert controller.state.current_step == 10
        assert controller.effective_index == 10
        assert controller.displayed_series(bars(10)) == bars(10)
        assert controller.current_label(bars(10)) is None


class TestPlayback:
    """Ticking through the series."""

    def test_tick_advances(self, controller, scheduler):
        controller.set_enabled(True)
        controller.play_pause()
        assert controller.status == ReplayStatus.PLAYING

        scheduler.advance(799)
        assert controller.state.current_step == 1
        scheduler.advance(1)
        assert controller.state.current_step == 2

    def test_stops_at_end(self, scheduler):
        controller = ReplayController(scheduler)
        controller.set_total_steps(3)
        controller.set_enabled(True)
        controller.play_pause()

        scheduler.advance(800 * 5)

        assert controller.state.current_step == 3
        assert controller.status == ReplayStatus.PAUSED
        assert not controller.is_pending

    def test_play_at_end_restarts(self, scheduler):
        controller = ReplayController(scheduler)
        controller.set_total_steps(3)
        controller.set_enabled(True)
        controller.seek(3)
        controller.play_pause()

        assert controller.state.current_step == 1
        assert controller.status == ReplayStatus.PLAYING

    def test_pause_cancels_timer(self, controller, scheduler):
        controller.set_enabled(True)
        controller.play_pause()
        controller.play_pause()

        assert not controller.is_pending
        scheduler.advance(5000)
        assert controller.state.current_step == 1

    def test_single_candle_never_plays(self, scheduler):
        controller = ReplayController(scheduler)
        controller.set_total_steps(1)
        controller.set_enabled(True)
        controller.play_pause()
        assert controller.status == ReplayStatus.PAUSED

    def test_restart(self, controller):
        controller.set_enabled(True)
        controller.seek(6)
        controller.restart()
        assert controller.state.current_step == 1
        assert controller.status == ReplayStatus.PAUSED

    def test_dispose_stops_ticks(self, controller, scheduler):
        controller.set_enabled(True)
        controller.play_pause()
        controller.dispose()

        scheduler.advance(5000)
        assert controller.state.current_step == 1
        assert scheduler.pending == []


class TestSpeed:
    """Interval derivation from speed."""

    @pytest.mark.parametrize("speed,expected", [(1, 800), (2, 400), (0.25, 3200), (16, 120)])
    def test_interval(self, controller, speed, expected):
        controller.set_speed(speed)
        assert controller.interval_ms == expected

    @pytest.mark.parametrize("speed,expected", [(32, 16), (0.1, 0.25)])
    def test_speed_clamped_to_range(self, controller, speed, expected):
        controller.set_speed(speed)
        assert controller.state.speed == expected

    def test_clamped_speed_floors_interval(self, controller):
        controller.set_speed(100)
        assert controller.interval_ms == 120

    def test_custom_speed_range(self, scheduler):
        controller = ReplayController(scheduler, ReplayConfig(min_speed=1, max_speed=4))
        controller.set_speed(8)
        assert controller.state.speed == 4
        assert controller.interval_ms == 200

    def test_frames_per_step(self, controller):
        assert controller.frames_per_step == 50

    def test_invalid_speed(self, controller):
        with pytest.raises(ReplayError):
            controller.set_speed(0)

    def test_speed_change_reschedules(self, controller, scheduler):
        controller.set_enabled(True)
        controller.play_pause()
        scheduler.advance(400)
        controller.set_speed(2)

        scheduler.advance(399)
        assert controller.state.current_step == 1
        scheduler.advance(1)
        assert controller.state.current_step == 2


class TestSeekAndResize:
    """Manual positioning and series growth."""

    @pytest.mark.parametrize("value,expected", [(0, 1), (-3, 1), (4.6, 5), (99, 10)])
    def test_seek_clamps(self, controller, value, expected):
        controller.set_enabled(True)
        controller.seek(value)
        assert controller.state.current_step == expected

    def test_appended_candles_shift_playhead(self, controller):
        controller.set_enabled(True)
        controller.seek(4)
        controller.set_total_steps(12)
        assert controller.state.current_step == 6

    def test_shrink_clamps_playhead(self, controller):
        controller.set_enabled(True)
        controller.seek(9)
        controller.set_total_steps(5)
        assert controller.state.current_step == 5

    def test_disabled_follows_total(self, controller):
        controller.set_total_steps(20)
        assert controller.state.current_step == 20


class TestAnimation:
    """Candle formation frames."""

    def test_frames_progress_then_commit(self, controller, scheduler):
        controller.set_enabled(True)
        controller.seek(5)
        controller.set_animate(True)
        controller.play_pause()
        assert controller.state.animation_progress == 0.0

        scheduler.advance(16)
        assert controller.state.current_step == 5
        assert controller.state.animation_progress == pytest.approx(0.02)
        # Indicators lag one candle behind the forming bar
        assert controller.indicator_display_index == 4

        scheduler.advance(16 * 49)
        assert controller.state.current_step == 6
        assert controller.state.animation_progress == 0.0
        assert controller.indicator_display_index == 6

    def test_animated_series_replaces_last_bar(self, controller):
        controller.set_enabled(True)
        controller.seek(3)
        controller.set_animate(True)
        controller.set_animation_progress(0.5)

        shown = controller.animated_series(bars(10))
        assert len(shown) == 3
        assert shown[:2] == bars(10)[:2]
        assert shown[-1] != bars(10)[2]

    def test_bullish_phases(self):
        candle = BarPoint(time=1, open=10, high=15, low=8, close=13)

        start = animate_candle(candle, 0)
        assert (start.low, start.high, start.close) == (10, 10, 10)

        middle = animate_candle(candle, 0.5)
        assert middle.low == 8
        assert middle.high == pytest.approx(12.5)
        assert middle.close == pytest.approx(11.5)

        end = animate_candle(candle, 1.0)
        assert (end.low, end.high) == (8, 15)
        assert end.close == pytest.approx(13)

    def test_bearish_mirrors(self):
        candle = BarPoint(time=1, open=13, high=15, low=8, close=10)

        early = animate_candle(candle, 0.15)
        assert early.low == 13
        assert early.high == pytest.approx(14)

        end = animate_candle(candle, 1.0)
        assert end.close == pytest.approx(10)


class TestAsyncioScheduler:
    """Real event loop scheduler."""

    def test_fires_and_cancels(self):
        async def run():
            fired = []
            scheduler = AsyncioScheduler()
            scheduler.after(1, lambda: fired.append("kept"))
            scheduler.after(1, lambda: fired.append("cancelled")).cancel()
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(run()) == ["kept"]

    def test_drives_controller(self):
        async def run():
            controller = ReplayController(AsyncioScheduler(), ReplayConfig(min_interval_ms=1, base_interval_ms=1))
            controller.set_total_steps(3)
            controller.set_enabled(True)
            controller.play_pause()
            await asyncio.sleep(0.1)
            controller.dispose()
            return controller.state.current_step

        assert asyncio.run(run()) == 3


class TestViews:
    """Series views and labels."""

    def test_label_in_utc(self, controller):
        controller.set_enabled(True)
        assert controller.current_label(bars(10)) == "Jan 01, 2024, 00:00:00"

        controller.seek(3)
        assert controller.current_label(bars(10)) == "Jan 01, 2024, 02:00:00"

    def test_view(self, controller):
        controller.set_enabled(True)
        controller.seek(4)
        volume = [SeriesPoint(time=b.time, value=100) for b in bars(10)]

        view = controller.view(bars(10), volume)
        assert len(view.displayed_series) == 4
        assert len(view.displayed_volume) == 4
        assert view.label == "Jan 01, 2024, 03:00:00"

    def test_subscribe(self, controller):
        seen = []
        unsubscribe = controller.subscribe(lambda state: seen.append(state.current_step))

        controller.set_enabled(True)
        controller.seek(7)
        unsubscribe()
        controller.seek(8)

        assert seen == [1, 7]
