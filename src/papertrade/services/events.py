"""Fire-and-forget event dispatch on a background thread pool."""

import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], None]


class EventDispatcher:
    """
    Runs subscribed handlers in the background.

    The submitting operation never waits for, or sees the failures of, its
    handlers; a failing handler is logged from the future's done-callback.
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="events")
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        with self._lock:
            self._handlers[event_name].append(handler)

    def submit(self, event_name: str, payload: dict[str, Any]) -> list[Future]:
        """Schedule every handler for the event; returns their futures."""
        with self._lock:
            handlers = list(self._handlers.get(event_name, ()))

        futures: list[Future] = []
        for handler in handlers:
            try:
                future = self._executor.submit(handler, dict(payload))
            except RuntimeError:
                logger.warning(f"Event {event_name} dropped: dispatcher is shut down")
                break
            future.add_done_callback(partial(_log_handler_failure, event_name, handler))
            futures.append(future)
        return futures

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def _log_handler_failure(event_name: str, handler: EventHandler, future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        name = getattr(handler, "__name__", repr(handler))
        logger.error(f"Handler {name} for event {event_name} failed: {error}", exc_info=error)


def log_portfolio_created(payload: dict[str, Any]) -> None:
    logger.info(f"Portfolio created for {payload.get('user_id')} with balance {payload.get('balance')}")
