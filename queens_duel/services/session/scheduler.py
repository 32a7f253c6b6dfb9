import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict


class StartScheduler(ABC):
    """Runs a callback once after a delay; a newer schedule or a cancel for the
    same key supersedes the pending one."""

    @abstractmethod
    def schedule(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        ...

    @abstractmethod
    def cancel(self, key: str) -> None:
        ...


class BackgroundStartScheduler(StartScheduler):
    """Delayed starts on Socket.IO background tasks.

    - One live ticket per key (room id); scheduling again or cancelling
      invalidates the previous ticket, so a sleeping worker wakes up and aborts
    - ``inline=True`` runs the callback synchronously without sleeping, which
      keeps socket tests deterministic
    """

    def __init__(self, socketio, app=None, inline: bool = False, logger=None):
        self.socketio = socketio
        self.app = app
        self.inline = inline
        self.logger = logger or logging.getLogger(__name__)
        self._tickets: Dict[str, int] = {}
        self._counter = itertools.count(1)

    def schedule(self, key, delay, callback):
        ticket = next(self._counter)
        self._tickets[key] = ticket
        self.logger.info(f"[timer-set] room={key} ticket={ticket} delay={delay}s")
        if self.inline:
            self._worker(key, ticket, 0, callback)
        else:
            self.socketio.start_background_task(self._worker, key, ticket, delay, callback)

    def cancel(self, key):
        if self._tickets.pop(key, None) is not None:
            self.logger.info(f"[timer-cancel] room={key}")

    def pending(self, key) -> bool:
        return key in self._tickets

    def _worker(self, key: str, ticket: int, delay: float, callback: Callable[[], None]) -> None:
        if delay:
            self.socketio.sleep(delay)
        if self._tickets.get(key) != ticket:
            self.logger.info(f"[timer-abort] room={key} ticket={ticket} superseded")
            return
        self._tickets.pop(key, None)
        self.logger.info(f"[timer-fire] room={key} ticket={ticket}")
        if self.app is not None:
            with self.app.app_context():
                callback()
        else:
            callback()
