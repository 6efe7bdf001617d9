# Overview: In-process domain event bus; delivers lifecycle events to subscribers after commit.

"""
Domain Events

WHY: The lifecycle engine must not know who cares about a received transfer.
It publishes an event once the status change has committed; subscribers
(email today) run after that point and can never roll the transfer back.

DELIVERY:
- async_mode=False: handlers run inline, in publish order
- async_mode=True: handlers run on a bounded ThreadPoolExecutor
- context_factory (e.g. app.app_context) wraps each handler so it can read
  config and the store from a worker thread
- A failing handler is logged and absorbed; the publisher never sees it
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferReceived:
    """Published once per transfer, after the received transition commits."""
    transfer: dict
    from_location_name: str
    to_location_name: str
    recipient_email: Optional[str]


class EventBus:

    def __init__(
        self,
        *,
        async_mode: bool = False,
        max_workers: int = 2,
        context_factory: Optional[Callable] = None,
    ):
        self.async_mode = async_mode
        self._context_factory = context_factory
        self._handlers = defaultdict(list)
        self._lock = threading.Lock()
        self._executor = (
            ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="events")
            if async_mode
            else None
        )

    def subscribe(self, event_type: type, handler: Callable) -> None:
        with self._lock:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable) -> None:
        with self._lock:
            if handler in self._handlers.get(event_type, []):
                self._handlers[event_type].remove(handler)

    def publish(self, event) -> list[Future]:
        """
        Deliver event to every handler subscribed to its type.

        Returns the futures in async mode (tests may wait on them), an empty
        list otherwise.
        """
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))

        futures = []
        for handler in handlers:
            if self._executor is not None:
                futures.append(self._executor.submit(self._deliver, handler, event))
            else:
                self._deliver(handler, event)
        return futures

    def _deliver(self, handler: Callable, event) -> None:
        context = self._context_factory() if self._context_factory else nullcontext()
        try:
            with context:
                handler(event)
        except Exception:
            logger.exception(
                "Event handler %s failed for %s",
                getattr(handler, "__qualname__", repr(handler)),
                type(event).__name__,
            )

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
