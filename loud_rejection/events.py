"""
Loud Rejection - Rejection Event Source
=========================================
Two notification channels, and an in-process emitter for them.

Channels:
- unhandled_rejection(reason, handle): a promise was rejected and
  nobody has observed it yet
- rejection_handled(handle): a previously unhandled promise
  has since been observed

The emitter routes notifications to subscribers:
1. Look up subscribers for the channel
2. Call handlers sequentially, in registration order
3. Catch and log a failing handler
4. Continue to the next handler

Dispatch never raises. A broken subscriber must not hide a
rejection from the others.
"""

import logging
from threading import Lock
from typing import Any, Callable, Protocol

from loud_rejection.errors import (
    DuplicateSubscriberError,
    EventSourceError,
    UnknownChannelError,
)

logger = logging.getLogger("loud_rejection.events")

UNHANDLED_REJECTION = "unhandled_rejection"
REJECTION_HANDLED = "rejection_handled"

CHANNELS = frozenset({UNHANDLED_REJECTION, REJECTION_HANDLED})


class RejectionEventSource(Protocol):
    """Anything handlers can subscribe to by channel name."""

    def subscribe(self, channel: str, handler: Callable[..., Any]) -> None:
        ...  # pragma: no cover


class RejectionEmitter:
    """
    In-memory rejection event source.

    Adapters (asyncio, manual reporting) call emit_*; the reconciler
    subscribes. Subscription is lock-protected because adapters may
    be wired from any thread.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[..., Any]]] = {
            channel: [] for channel in CHANNELS
        }
        self._lock = Lock()

    def subscribe(self, channel: str, handler: Callable[..., Any]) -> None:
        """
        Register a handler for a channel.

        Raises:
            UnknownChannelError:      channel is not one of CHANNELS
            EventSourceError:         handler is not callable
            DuplicateSubscriberError: handler already on this channel
        """
        if channel not in CHANNELS:
            raise UnknownChannelError(channel)

        if not callable(handler):
            raise EventSourceError(
                f"Handler must be callable, got {type(handler)}."
            )

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            for existing in self._subscribers[channel]:
                if existing == handler:
                    raise DuplicateSubscriberError(channel, handler_name)
            self._subscribers[channel].append(handler)

        logger.debug(f"Subscriber registered: {handler_name} → {channel}")

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, []))

    def emit_unhandled(self, reason: Any, handle: Any) -> dict:
        """Notify that handle was rejected with reason and is unobserved."""
        return self._dispatch(UNHANDLED_REJECTION, reason, handle)

    def emit_handled(self, handle: Any) -> dict:
        """Notify that handle has been observed after all."""
        return self._dispatch(REJECTION_HANDLED, handle)

    def _dispatch(self, channel: str, *args: Any) -> dict:
        with self._lock:
            subscribers = list(self._subscribers[channel])

        result = {
            "channel": channel,
            "subscribers_notified": 0,
            "subscribers_failed": 0,
            "failures": [],
        }

        for handler in subscribers:
            handler_name = getattr(handler, "__qualname__", str(handler))
            try:
                handler(*args)
                result["subscribers_notified"] += 1
            except Exception as exc:
                result["subscribers_failed"] += 1
                result["failures"].append({
                    "handler": handler_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                })
                logger.error(
                    f"Subscriber failed: {handler_name} on {channel}: {exc}",
                    exc_info=True,
                )

        return result
