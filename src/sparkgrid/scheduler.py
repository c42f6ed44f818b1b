"""Tick sources that drive the periodic simulation step."""

from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging
import threading

TickHandler = Callable[[], None]


class TickSource(ABC):
    """Calls a handler once per simulation step."""

    def __init__(self):
        self._handler: Optional[TickHandler] = None
        self.logger = logging.getLogger(f"sparkgrid.scheduler.{self.__class__.__name__}")

    @property
    def is_running(self) -> bool:
        return self._handler is not None

    @abstractmethod
    def start(self, handler: TickHandler) -> None:
        """Start delivering ticks to ``handler``."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering ticks."""
        pass


class ManualTickSource(TickSource):
    """Tick source fired explicitly by the caller."""

    def start(self, handler: TickHandler) -> None:
        self._handler = handler

    def stop(self) -> None:
        self._handler = None

    def fire(self, count: int = 1) -> None:
        """Deliver ``count`` ticks synchronously."""
        if self._handler is None:
            raise RuntimeError("Tick source is not started")
        for _ in range(count):
            self._handler()


class IntervalTickSource(TickSource):
    """Tick source running on a daemon thread at a fixed interval."""

    def __init__(self, interval: float = 3.0):
        super().__init__()
        if interval <= 0:
            raise ValueError(f"Tick interval must be > 0, got {interval}")
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self, handler: TickHandler) -> None:
        if self._thread is not None and self._thread.is_alive():
            return

        self._handler = handler
        # A fresh event per run; a loop that outlived stop() keeps its own set event.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._tick_loop, args=(self._stop_event, handler),
            name="sparkgrid-ticker", daemon=True
        )
        self._thread.start()
        self.logger.info(f"Started ticking every {self.interval}s")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1.0)
            self._thread = None
        self._handler = None
        self.logger.info("Stopped ticking")

    def _tick_loop(self, stop_event: threading.Event, handler: TickHandler) -> None:
        """Wait one interval, then tick, until stopped."""
        while not stop_event.wait(self.interval):
            try:
                handler()
            except Exception as e:
                self.logger.error(f"Tick handler failed: {e}")
