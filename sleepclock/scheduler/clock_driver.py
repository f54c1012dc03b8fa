"""Periodic schedule re-evaluation driving the clock display"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

from sleepclock.config import TICK_INTERVAL_SECONDS
from sleepclock.models.schedule import EvaluationResult, Schedule
from sleepclock.services.nap_overlay import NapOverlay, NapStore
from sleepclock.utils.datetime_helpers import now_local

logger = logging.getLogger(__name__)

Observer = Callable[[EvaluationResult], None]


class ClockDriver:
    """
    Re-evaluate the schedule on a fixed cadence and publish the result

    The schedule is read through `schedule_provider` on every tick, so edits
    made between ticks take effect on the next one. Nap state lives in the
    injected NapStore and is only changed through start_nap / cancel_nap /
    auto-expiry.
    """

    def __init__(
        self,
        schedule_provider: Callable[[], Schedule],
        nap_store: Optional[NapStore] = None,
        clock: Callable[[], datetime] = now_local,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self.schedule_provider = schedule_provider
        self.overlay = NapOverlay(nap_store)
        self.clock = clock
        self.tick_interval = tick_interval

        self._observers: List[Observer] = []
        self._current_time: Optional[datetime] = None
        self._result: Optional[EvaluationResult] = None
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # State exposed to the UI
    # ------------------------------------------------------------------

    @property
    def current_time(self) -> datetime:
        """Instant sampled on the last tick"""
        if self._current_time is None:
            self.tick()
        return self._current_time

    @property
    def result(self) -> EvaluationResult:
        """Latest evaluation, computed now if no tick has run yet"""
        if self._result is None:
            self.tick()
        return self._result

    @property
    def is_nap_active(self) -> bool:
        return self.overlay.is_active_at(self.clock())

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer called with every published result

        Returns:
            Function that unregisters the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def tick(self) -> EvaluationResult:
        """Sample the clock, re-evaluate and publish"""
        now = self.clock()
        result = self.overlay.evaluate(now, self.schedule_provider())
        self._publish(now, result)
        return result

    def _publish(self, now: datetime, result: EvaluationResult) -> None:
        previous = self._result
        self._current_time = now
        self._result = result

        if previous is None or previous.current_phase != result.current_phase:
            logger.info(
                f"Phase {result.current_phase.value}"
                f"{' (nap)' if result.nap_active else ''}, next {result.next_phase.value} "
                f"at {result.next_event_time.strftime('%Y-%m-%d %H:%M')} "
                f"in {result.minutes_until_next_event} min"
            )

        for observer in list(self._observers):
            try:
                observer(result)
            except Exception as e:
                logger.error(f"Clock observer {observer!r} failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Nap controls
    # ------------------------------------------------------------------

    def start_nap(self) -> datetime:
        """
        Start a nap now

        Returns:
            When the nap ends

        Raises:
            InvalidStateError: If a nap can't start now
        """
        now = self.clock()
        schedule = self.schedule_provider()
        nap_end = self.overlay.start_nap(now, schedule)
        self._publish(now, self.overlay.evaluate(now, schedule))
        return nap_end

    def cancel_nap(self) -> None:
        """
        Cancel the active nap

        Raises:
            InvalidStateError: If no nap is active
        """
        self.overlay.cancel_nap(self.clock())
        self.tick()

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Tick every `tick_interval` seconds until cancelled"""
        logger.info(f"Clock driver running, tick every {self.tick_interval}s")
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while True:
            try:
                self.tick()
            except Exception as e:
                # A malformed schedule fails this tick only
                logger.error(f"Clock tick failed: {e}", exc_info=True)

            next_tick += self.tick_interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    def start(self) -> asyncio.Task:
        """Register the periodic tick task on the running event loop"""
        if self.is_running:
            return self._task
        self._task = asyncio.create_task(self.run(), name="clock-driver")
        return self._task

    async def stop(self) -> None:
        """Cancel the tick task and wait for it to finish"""
        if self._task is None:
            return

        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Clock driver stopped")

    async def __aenter__(self) -> "ClockDriver":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

