"""EngineManager: runs the GameLoop on a background thread.

The API reads from an atomically-swapped immutable Snapshot. Ticks and
player actions mutate GameState under one lock, so an action never lands
in the middle of a tick.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, TypeVar

from bastion.core.snapshot import Snapshot
from bastion.engine.session import GameSession
from bastion.utils.event_log import EventLog

if TYPE_CHECKING:
    from bastion.actions.commands import GameActions
    from bastion.config import GameConfig
    from bastion.systems.theme import ThemeMapProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EngineManager:
    """Manages the game lifecycle on a background thread.

    Provides thread-safe access to:
      - latest snapshot (atomic reference swap)
      - event log (lock-guarded ring buffer)
      - control commands (start / pause / resume / step / reset)
      - player actions (serialized with ticks)
    """

    def __init__(self, config: GameConfig, theme_provider: ThemeMapProvider | None = None) -> None:
        self._config = config
        self.config = config
        self._tick_rate: float = config.tick_rate
        self._theme_provider = theme_provider

        self._session: GameSession | None = None

        # Thread-safe shared state
        self._state_lock = threading.RLock()
        self._snapshot_lock = threading.Lock()
        self._latest_snapshot: Snapshot | None = None
        self._event_log = EventLog()

        # Control
        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._step_requested = threading.Event()
        self._stop_requested = threading.Event()

        self._build()

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(0.001, min(value, 2.0))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def session(self) -> GameSession:
        assert self._session is not None
        return self._session

    # -- snapshot access --

    def get_snapshot(self) -> Snapshot | None:
        with self._snapshot_lock:
            return self._latest_snapshot

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="engine-loop", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs)", self._tick_rate)

    def pause(self) -> None:
        self._paused.set()
        with self._state_lock:
            self.session.set_paused(True)
        self._publish()
        logger.info("EngineManager paused at tick %d", self._current_tick())

    def resume(self) -> None:
        self._paused.clear()
        with self._state_lock:
            self.session.set_paused(False)
        self._publish()
        logger.info("EngineManager resumed at tick %d", self._current_tick())

    def step(self) -> None:
        """Execute exactly one tick (pauses first if needed)."""
        if not self._paused.is_set():
            self.pause()
        self._step_requested.set()

    def stop(self) -> None:
        self._stop_requested.set()
        self._paused.clear()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        logger.info("EngineManager stopped.")

    def reset(self, theme: str | None = None) -> None:
        """Stop, start a brand-new game and leave it ready to start."""
        self.stop()
        self._event_log.clear()
        self._build(theme)
        logger.info("EngineManager reset.")

    def set_game_speed(self, speed: float) -> None:
        with self._state_lock:
            self.session.set_speed(speed)
        self._publish()

    # -- player actions --

    def perform(self, action: Callable[[GameActions], T]) -> T:
        """Run *action* against the live game between ticks and publish the result."""
        with self._state_lock:
            result = action(self.session.actions)
            self._publish()
        return result

    def tick_now(self) -> bool:
        """Run one tick on the caller's thread (headless use and tests)."""
        with self._state_lock:
            advanced = self.session.loop.tick_once()
            self._publish()
        return advanced

    # -- internals --

    def _build(self, theme: str | None = None) -> None:
        with self._state_lock:
            self._session = GameSession(self._config, self._theme_provider, theme)
            self._publish()

    def _run_loop(self) -> None:
        """Background thread main loop."""
        logger.info("Engine thread started.")

        while not self._stop_requested.is_set():
            # Handle pause
            if self._paused.is_set() and not self._step_requested.is_set():
                time.sleep(0.01)
                continue

            single_step = self._step_requested.is_set()
            if single_step:
                self._step_requested.clear()

            with self._state_lock:
                state = self.session.state
                if single_step:
                    state.paused = False
                self.session.loop.tick_once()
                if single_step:
                    state.paused = True
                self._publish()

            # Rate limiting
            if not single_step:
                time.sleep(self._tick_rate)

        self._running.clear()
        logger.info("Engine thread exited.")

    def _publish(self) -> None:
        """Swap snapshot and push events from the last tick and any actions."""
        with self._state_lock:
            session = self.session
            snap = session.loop.create_snapshot()
            events = session.loop.tick_events + session.actions.drain_events()
            session.loop.tick_events.clear()
        with self._snapshot_lock:
            self._latest_snapshot = snap
        if events:
            self._event_log.append_many(events)

    def _current_tick(self) -> int:
        if self._session:
            return self._session.state.tick
        return 0
