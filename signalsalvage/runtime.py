from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from signalsalvage.actions import Action, HardReset, LoadState, Tick, UpdateSaveTime
from signalsalvage.catalog import default_definition
from signalsalvage.definition import GameDefinition
from signalsalvage.economy import run_sanity_checks
from signalsalvage.persistence import MemoryStorage, SaveManager
from signalsalvage.reducer import reduce, verify_beacon_reset, verify_prestige_reset
from signalsalvage.state import GameState, initial_state

logger = logging.getLogger(__name__)


class GameRuntime:
    """Single owner of the live game state.

    Every state replacement goes through ``dispatch`` under one lock, so the
    frame clock, the autosave timer and callers on other threads never
    interleave transitions.
    """

    def __init__(
        self,
        definition: GameDefinition | None = None,
        manager: SaveManager | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        definition = definition or default_definition()
        errors = definition.validate()
        if errors:
            raise ValueError(
                "Invalid GameDefinition:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.definition = definition
        self.manager = manager or SaveManager(MemoryStorage(), definition)
        self._clock = clock
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self.state: GameState = initial_state(definition, clock())

    # ── Dispatch ─────────────────────────────────────────────────────

    def dispatch(self, action: Action) -> GameState:
        with self._lock:
            self.state = reduce(self.definition, self.state, action)
            return self.state

    def get_state(self) -> GameState:
        with self._lock:
            return self.state

    def tick(self, delta: float) -> GameState:
        """One frame: *delta* is clamped to the per-tick limit."""
        limit = self.definition.engine.max_tick_seconds
        return self.dispatch(Tick(max(0.0, min(limit, delta))))

    def advance(self, seconds: float) -> float:
        """Replay *seconds* of elapsed time as fixed-size ticks.

        The gap is capped at ``max_offline_seconds`` and replayed as whole
        chunks plus a remainder. Returns the simulated duration.
        """
        engine = self.definition.engine
        if not math.isfinite(seconds) or seconds <= 0:
            return 0.0
        simulated = min(seconds, engine.max_offline_seconds)
        chunk = engine.offline_chunk_seconds
        whole = int(simulated // chunk)
        remainder = simulated - whole * chunk

        with self._lock:
            for _ in range(whole):
                self.dispatch(Tick(chunk))
            if remainder > 0:
                self.dispatch(Tick(remainder))

        if seconds > chunk:
            logger.info(
                "Caught up %.1fs of elapsed time (%.1fs requested)", simulated, seconds
            )
        return simulated

    def catch_up(self, now: float | None = None) -> float:
        """Simulate the time since the last save, then stamp *now*."""
        if now is None:
            now = self._clock()
        with self._lock:
            simulated = self.advance(now - self.state.last_save_at)
            self.dispatch(UpdateSaveTime(now))
        return simulated

    # ── Persistence ──────────────────────────────────────────────────

    def load_saved(self, now: float | None = None) -> bool:
        """Load the saved game and replay the time it was away."""
        if now is None:
            now = self._clock()
        loaded = self.manager.load(now)
        if loaded is None:
            return False
        with self._lock:
            self.dispatch(LoadState(loaded))
            self.catch_up(now)
        return True

    def save(self, now: float | None = None) -> bool:
        if now is None:
            now = self._clock()
        with self._lock:
            ok = self.manager.save(self.state)
            self.dispatch(UpdateSaveTime(now))
        return ok

    def export_text(self) -> str:
        return self.manager.export_text(self.get_state())

    def import_text(self, text: str, now: float | None = None) -> bool:
        """Replace the game with an exported save. Invalid text changes nothing."""
        if now is None:
            now = self._clock()
        imported = self.manager.import_text(text, now)
        if imported is None:
            return False
        with self._lock:
            self.dispatch(LoadState(imported))
            self.manager.save(self.state)
        return True

    def hard_reset(self, now: float | None = None) -> GameState:
        if now is None:
            now = self._clock()
        with self._lock:
            self.manager.clear()
            return self.dispatch(HardReset(now))

    # ── Diagnostics ──────────────────────────────────────────────────

    def sanity_check(self) -> list[str]:
        state = self.get_state()
        issues = run_sanity_checks(self.definition, state)
        if not verify_prestige_reset(self.definition, state):
            issues.append("relay reset would break its invariants")
        if not verify_beacon_reset(self.definition, state):
            issues.append("beacon reset would break its invariants")
        for issue in issues:
            logger.warning("Sanity check: %s", issue)
        return issues

    # ── Background loops ─────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        """Start the frame clock and the autosave timer."""
        if self.running:
            return
        self._stop.clear()
        self._threads = [
            threading.Thread(target=self._clock_loop, name="signalsalvage-clock", daemon=True),
            threading.Thread(target=self._autosave_loop, name="signalsalvage-autosave", daemon=True),
        ]
        for thread in self._threads:
            thread.start()
        logger.debug("Runtime started")

    def stop(self) -> None:
        """Stop both loops together."""
        self._stop.set()
        for thread in self._threads:
            thread.join()
        self._threads = []
        logger.debug("Runtime stopped")

    def __enter__(self) -> GameRuntime:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    def _clock_loop(self) -> None:
        interval = self.definition.engine.frame_interval
        last = time.monotonic()
        while not self._stop.wait(interval):
            now = time.monotonic()
            elapsed, last = now - last, now
            if elapsed > self.definition.engine.max_tick_seconds:
                self.advance(elapsed)
            else:
                self.tick(elapsed)

    def _autosave_loop(self) -> None:
        interval = self.definition.engine.autosave_interval
        while not self._stop.wait(interval):
            self.save()
