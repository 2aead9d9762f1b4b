"""
Dwell Module - Hover-to-Select Engine
=====================================
Hands-free selection for the menu: a region is selected once the cursor has
stayed inside it for a fixed, uninterrupted dwell time.

The dwell timer is a cancellable deferred callback. ``DeferredScheduler``
runs such callbacks cooperatively from the frame loop, so selections never
fire in the middle of a frame and no locking is needed.
"""

import heapq
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Hashable, Dict, List, Optional, Sequence, Tuple

from holodraw.config import DwellConfig
from holodraw.geometry import Point

logger = logging.getLogger(__name__)


class TimerHandle:
    """Handle to a pending deferred callback."""

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not self._cancelled and not self._fired

    def cancel(self):
        """Cancel the callback; has no effect once it has fired."""
        self._cancelled = True

    def _run(self):
        self._fired = True
        self._callback()


class DeferredScheduler:
    """
    Cooperative timer queue driven by the frame loop.

    ``call_later`` registers a callback; ``run_pending`` runs every callback
    whose due time has passed, in due order.

    Args:
        clock: Monotonic time source in seconds
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.clock() + delay, callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def run_pending(self) -> int:
        """
        Run due callbacks.

        Returns:
            Number of callbacks that ran
        """
        now = self.clock()
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle._run()
            ran += 1
        return ran

    def pending_count(self) -> int:
        return sum(1 for _, _, h in self._queue if h.pending)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle in screen space (inclusive edges)."""
    left: float
    top: float
    right: float
    bottom: float

    def contains(self, point: Point) -> bool:
        return (self.left <= point.x <= self.right and
                self.top <= point.y <= self.bottom)


@dataclass(frozen=True)
class MenuRegion:
    """
    A hit-testable menu element.

    Attributes:
        kind: 'tool', 'size' or 'color'
        value: Value selected by this region
        bounds: Current screen-space bounds
    """
    kind: str
    value: Hashable
    bounds: Bounds

    @property
    def region_id(self) -> str:
        return f"{self.kind}-{self.value}"


class DwellSelector:
    """
    Fires a selection exactly once per continuous hover of ``dwell_time``.

    State is the hovered region id plus at most one pending timer. Hover
    changes, ``reset`` (menu close) and ``shutdown`` (teardown) all cancel
    the timer so no stale selection can fire afterwards.

    Args:
        scheduler: Deferred callback queue polled by the frame loop
        on_select: Called with the selected region
        config: Dwell and pulse durations
    """

    def __init__(
        self,
        scheduler: DeferredScheduler,
        on_select: Callable[[MenuRegion], None],
        config: DwellConfig = None
    ):
        self.scheduler = scheduler
        self.on_select = on_select
        self.config = config or DwellConfig()

        self.hovered_id: Optional[str] = None
        self._timer: Optional[TimerHandle] = None
        # Confirmation pulse timers keyed by region id
        self._pulses: Dict[str, TimerHandle] = {}

    def update(self, cursor: Optional[Point], regions: Sequence[MenuRegion]):
        """
        Hit-test the cursor for this frame.

        Args:
            cursor: Menu cursor in screen space, or None if no hand
            regions: Regions currently registered by the menu
        """
        hit = None
        if cursor is not None:
            for region in regions:
                if region.bounds.contains(cursor):
                    hit = region
                    break

        if hit is None:
            if self.hovered_id is not None:
                logger.debug("Hover left %s", self.hovered_id)
            self._clear_hover()
            return

        if hit.region_id == self.hovered_id:
            return

        self._cancel_timer()
        self.hovered_id = hit.region_id
        self._timer = self.scheduler.call_later(
            self.config.dwell_time, lambda: self._complete(hit)
        )
        logger.debug("Hover entered %s", hit.region_id)

    def _complete(self, region: MenuRegion):
        self._timer = None
        logger.info("Dwell selected %s", region.region_id)
        self.on_select(region)

        region_id = region.region_id
        previous = self._pulses.pop(region_id, None)
        if previous is not None:
            previous.cancel()
        self._pulses[region_id] = self.scheduler.call_later(
            self.config.pulse_time, lambda: self._pulses.pop(region_id, None)
        )

    def is_pulsing(self, region_id: str) -> bool:
        """Check if a region is showing its selection confirmation."""
        return region_id in self._pulses

    def has_pending_timer(self) -> bool:
        return self._timer is not None and self._timer.pending

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _clear_hover(self):
        self.hovered_id = None
        self._cancel_timer()

    def reset(self):
        """Drop hover state and cancel any pending selection (menu closed)."""
        self._clear_hover()
        for handle in self._pulses.values():
            handle.cancel()
        self._pulses.clear()

    def shutdown(self):
        """Cancel everything when the interaction surface is torn down."""
        self.reset()
