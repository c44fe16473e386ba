"""In-process change notifications so every view re-reads after a write."""
from collections import defaultdict
from typing import Callable, Dict, List

from zxsgit.constants import ChangeEvent
from zxsgit.utils.logger import logger

Listener = Callable[[], None]


class ChangeBus:
    """Synchronous publish/subscribe keyed by collection event."""

    def __init__(self):
        self._listeners: Dict[ChangeEvent, List[Listener]] = defaultdict(list)

    def subscribe(self, event: ChangeEvent, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            event: Collection event to listen for
            listener: Called with no arguments after each write

        Returns:
            Function that removes the listener
        """
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> int:
        """Notify every listener of the event; returns how many were called."""
        delivered = 0
        for listener in list(self._listeners[event]):
            try:
                listener()
            except Exception as e:
                logger.error(f"Listener for {event.value} failed: {e}", exc_info=True)
            delivered += 1
        logger.debug(f"Published {event.value} to {delivered} listener(s)")
        return delivered

    def listener_count(self, event: ChangeEvent) -> int:
        return len(self._listeners[event])
