import pytest

from holodraw.config import DwellConfig
from holodraw.dwell import Bounds, DeferredScheduler, DwellSelector, MenuRegion
from holodraw.geometry import Point

RED = MenuRegion('color', (0, 0, 255), Bounds(0, 0, 100, 100))
BLUE = MenuRegion('color', (255, 0, 0), Bounds(200, 0, 300, 100))
REGIONS = [RED, BLUE]

INSIDE_RED = Point(50, 50)
INSIDE_BLUE = Point(250, 50)
OUTSIDE = Point(150, 50)


@pytest.fixture
def setup(clock):
    scheduler = DeferredScheduler(clock)
    selected = []
    selector = DwellSelector(scheduler, selected.append)
    return scheduler, selector, selected


def hover(clock, scheduler, selector, cursor, seconds, step=0.1):
    """Simulate frames with the cursor held still for ``seconds``."""
    elapsed = 0.0
    while elapsed < seconds - 1e-9:
        clock.advance(step)
        elapsed += step
        scheduler.run_pending()
        selector.update(cursor, REGIONS)


def test_scheduler_runs_due_callbacks_in_order(clock):
    scheduler = DeferredScheduler(clock)
    calls = []
    scheduler.call_later(0.5, lambda: calls.append('b'))
    scheduler.call_later(0.2, lambda: calls.append('a'))
    handle = scheduler.call_later(0.3, lambda: calls.append('cancelled'))
    handle.cancel()
    assert scheduler.pending_count() == 2

    clock.advance(0.4)
    assert scheduler.run_pending() == 1
    clock.advance(0.2)
    assert scheduler.run_pending() == 1
    assert calls == ['a', 'b']
    assert scheduler.pending_count() == 0


def test_bounds_are_inclusive():
    b = Bounds(0, 0, 10, 10)
    assert b.contains(Point(10, 10))
    assert b.contains(Point(0, 0))
    assert not b.contains(Point(10.1, 5))


def test_no_selection_before_dwell_time(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    assert selector.hovered_id == RED.region_id

    clock.advance(0.799)
    scheduler.run_pending()
    assert selected == []
    assert selector.has_pending_timer()


def test_selection_at_dwell_time(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.8)
    scheduler.run_pending()
    assert selected == [RED]
    assert not selector.has_pending_timer()


def test_continuous_hover_selects_once(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    hover(clock, scheduler, selector, INSIDE_RED, 2.0)
    assert selected == [RED]


def test_leave_and_reenter_selects_again(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    hover(clock, scheduler, selector, INSIDE_RED, 1.0)
    assert selected == [RED]

    clock.advance(0.1)
    selector.update(OUTSIDE, REGIONS)
    assert selector.hovered_id is None

    selector.update(INSIDE_RED, REGIONS)
    hover(clock, scheduler, selector, INSIDE_RED, 1.0)
    assert selected == [RED, RED]


def test_interrupted_hover_does_not_select(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    hover(clock, scheduler, selector, INSIDE_RED, 0.5)
    selector.update(OUTSIDE, REGIONS)
    hover(clock, scheduler, selector, OUTSIDE, 1.0)
    assert selected == []


def test_moving_to_another_region_restarts_timer(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    hover(clock, scheduler, selector, INSIDE_RED, 0.5)

    selector.update(INSIDE_BLUE, REGIONS)
    assert selector.hovered_id == BLUE.region_id
    hover(clock, scheduler, selector, INSIDE_BLUE, 0.5)
    assert selected == []

    hover(clock, scheduler, selector, INSIDE_BLUE, 0.5)
    assert selected == [BLUE]


def test_missing_cursor_clears_hover(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    selector.update(None, REGIONS)
    assert selector.hovered_id is None
    clock.advance(2.0)
    scheduler.run_pending()
    assert selected == []


def test_vanished_region_is_skipped(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    selector.update(INSIDE_RED, [BLUE])
    assert selector.hovered_id is None
    clock.advance(1.0)
    scheduler.run_pending()
    assert selected == []


def test_reset_cancels_pending_selection(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.5)
    selector.reset()
    clock.advance(1.0)
    scheduler.run_pending()
    assert selected == []
    assert selector.hovered_id is None


def test_shutdown_cancels_pending_selection(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_BLUE, REGIONS)
    selector.shutdown()
    clock.advance(1.0)
    scheduler.run_pending()
    assert selected == []
    assert scheduler.pending_count() == 0


def test_confirmation_pulse(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.8)
    scheduler.run_pending()
    assert selector.is_pulsing(RED.region_id)

    clock.advance(0.2)
    scheduler.run_pending()
    assert not selector.is_pulsing(RED.region_id)


def test_dwell_time_is_configurable(clock):
    scheduler = DeferredScheduler(clock)
    selected = []
    selector = DwellSelector(scheduler, selected.append, DwellConfig(dwell_time=0.3))
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.3)
    scheduler.run_pending()
    assert selected == [RED]


def test_reset_cancels_confirmation_pulse(clock, setup):
    scheduler, selector, selected = setup
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.8)
    scheduler.run_pending()
    assert selector.is_pulsing(RED.region_id)

    selector.reset()
    assert not selector.is_pulsing(RED.region_id)
    assert scheduler.pending_count() == 0


def test_stale_pulse_does_not_clear_reselection(clock):
    scheduler = DeferredScheduler(clock)
    selected = []
    selector = DwellSelector(scheduler, selected.append,
                             DwellConfig(dwell_time=0.1, pulse_time=0.2))
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.1)
    scheduler.run_pending()
    assert selected == [RED]

    # Menu closes and reopens on the same region before the first pulse ends
    clock.advance(0.05)
    selector.reset()
    selector.update(INSIDE_RED, REGIONS)
    clock.advance(0.1)
    scheduler.run_pending()
    assert selected == [RED, RED]

    # Past the first pulse's end, still inside the second one
    clock.advance(0.1)
    scheduler.run_pending()
    assert selector.is_pulsing(RED.region_id)

    clock.advance(0.2)
    scheduler.run_pending()
    assert not selector.is_pulsing(RED.region_id)
