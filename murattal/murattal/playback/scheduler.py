"""
Timer scheduling for the playback controller.

The controller never calls ``loop.call_later`` directly; it goes through a
Scheduler so tests can replace wall-clock timers with a manually advanced one.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Protocol


class TimerHandle(Protocol):
    """Anything with a ``cancel()`` method, e.g. ``asyncio.TimerHandle``."""

    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Abstract one-shot timer factory."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Run ``callback`` once after ``delay`` seconds.

        Returns:
            A handle whose ``cancel()`` prevents the callback from running
        """
        pass


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)
