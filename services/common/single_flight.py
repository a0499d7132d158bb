"""
Single-flight guard: at most one run of an operation at a time.
"""

import threading
from contextlib import contextmanager
from enum import Enum

from logging_config import get_logger

logger = get_logger(__name__)


class FlightState(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'


class OperationInProgressError(Exception):
    """Raised when an operation is triggered while a previous run is still active"""

    def __init__(self, name: str):
        super().__init__(f"{name} is already in progress")
        self.name = name


class SingleFlight:
    """
    Explicit IDLE -> RUNNING -> IDLE state machine.

    Usage:
        guard = SingleFlight('resident_import')
        with guard.run():
            ...  # OperationInProgressError if another run holds the guard
    """

    def __init__(self, name: str):
        self.name = name
        self._state = FlightState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> FlightState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == FlightState.RUNNING

    def try_acquire(self) -> bool:
        with self._lock:
            if self._state == FlightState.RUNNING:
                return False
            self._state = FlightState.RUNNING
            return True

    def release(self) -> None:
        with self._lock:
            self._state = FlightState.IDLE

    @contextmanager
    def run(self):
        if not self.try_acquire():
            logger.warning("Rejected re-entrant trigger", operation=self.name)
            raise OperationInProgressError(self.name)
        try:
            yield self
        finally:
            self.release()
