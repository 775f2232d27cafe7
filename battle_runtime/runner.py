import asyncio
import logging
from typing import List, Optional
from battle_engine.engine import BattleEngine
from battle_engine.model import Combatant, Event
from .eventlog import EventLog

logger = logging.getLogger(__name__)

class BattleRunner:
    """Async driver that plays one battle round per tick."""

    def __init__(self, engine: BattleEngine, round_ms: int = 500, time_compression: float = 30.0,
                 max_rounds: Optional[int] = None):
        self.engine = engine
        self.round_ms = round_ms
        self.time_compression = time_compression
        self.sleep_s = (round_ms / 1000.0) / max(1.0, time_compression)
        self.max_rounds = max_rounds
        self.events = EventLog()
        self._cancel = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    async def start(self):
        """Start the round loop."""
        if self._task:
            return
        logger.info("Starting battle: %d units, %.4fs per round", len(self.engine.roster), self.sleep_s)
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Abort the battle before its next round and wait for the loop to exit."""
        if not self._task:
            return
        self._cancel.set()
        await self._task
        self._task = None

    async def wait(self):
        """Wait until the battle reaches a terminal state."""
        if self._task:
            await self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self):
        """Main loop - play a round, log its events, pause until the next one."""
        while True:
            async with self._lock:
                if self._cancel.is_set():
                    evts: List[Event] = self.engine.abort()
                elif self.max_rounds is not None and self.engine.round >= self.max_rounds:
                    evts = self.engine.abort()
                else:
                    evts = self.engine.step()

            self.events.append_many(evts)
            if self.engine.finished:
                logger.info("Battle ended: %s after %d rounds", self.engine.status.value, self.engine.round)
                return
            # Wakes early when stop() is called
            try:
                await asyncio.wait_for(self._cancel.wait(), timeout=self.sleep_s)
            except asyncio.TimeoutError:
                pass

    async def snapshot(self) -> List[Combatant]:
        """Get current roster (consistent between rounds)."""
        async with self._lock:
            return list(self.engine.snapshot())

    def set_time_compression(self, time_compression: float):
        """Update time compression factor (1.0 = real-time, higher = faster)."""
        self.time_compression = max(0.1, min(1000.0, time_compression))
        self.sleep_s = (self.round_ms / 1000.0) / max(1.0, self.time_compression)
        logger.info("Time compression set to %sx (sleep: %.4fs)", self.time_compression, self.sleep_s)
