from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from chat_autopilot.agent.views import TickOutcome
from chat_autopilot.logging_config import LogSink, Severity
from chat_autopilot.timing import monotonic_seconds

if TYPE_CHECKING:
    from chat_autopilot.agent.stages import TickStage
    from chat_autopilot.agent.state import SchedulerState

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Fixed-interval tick driving an ordered list of stages.
    Ticks never overlap; a failing stage is logged and the loop keeps going.
    """

    def __init__(
        self,
        state: SchedulerState,
        stages: Sequence[TickStage],
        log: LogSink,
        interval_seconds: float = 2.0,
        cooldown_seconds: float = 1.0,
        clock: Callable[[], float] = monotonic_seconds,
    ):
        self.state = state
        self.stages = list(stages)
        self.log = log
        self.interval_seconds = interval_seconds
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    async def tick(self) -> TickOutcome:
        if not self.state.running:
            return TickOutcome.SKIPPED_STOPPED
        if self.state.in_cooldown(self.clock(), self.cooldown_seconds):
            return TickOutcome.SKIPPED_COOLDOWN
        if self.state.recovery_in_flight:
            self.log("Recovery in progress, skipping this check.", Severity.DEBUG)
            return TickOutcome.SKIPPED_RECOVERY_IN_FLIGHT

        for stage in self.stages:
            try:
                outcome = await stage.run()
            except Exception as e:
                logger.error(f"Tick stage '{stage.name}' failed", exc_info=True)
                self.log(f"Check failed in stage '{stage.name}': {type(e).__name__}: {e}", Severity.ERROR)
                return TickOutcome.FAILED
            if outcome is not None:
                return outcome
        return TickOutcome.IDLE

    async def run(self):
        logger.debug("Scheduler component started.")
        loop = asyncio.get_running_loop()
        # Fixed period: a slow tick (e.g. the backup plan's send delay) eats into the next sleep.
        next_tick_at = loop.time() + self.interval_seconds
        try:
            while self.state.running:
                await asyncio.sleep(max(0.0, next_tick_at - loop.time()))
                # stop() may have landed while we slept
                if not self.state.running:
                    break
                await self.tick()
                # An overrun tick is followed by exactly one immediate tick, never a burst.
                next_tick_at = max(next_tick_at + self.interval_seconds, loop.time())
        except asyncio.CancelledError:
            logger.debug("Scheduler run() cancelled")
        finally:
            logger.info("Scheduler component stopped.")

    def start(self) -> asyncio.Task:
        """
        Spawn the tick loop on the running event loop; a live loop is reused.

        Raises:
            RuntimeError: called outside a running event loop. ``state.running`` is left untouched.
        """
        if self._task is not None and not self._task.done():
            return self._task
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self.run(), name="autopilot-scheduler")
        self.state.running = True
        return self._task

    def stop(self):
        self.state.running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
