"""
Loud Rejection - asyncio Adapter
==================================
Feeds asyncio's "exception was never retrieved" reports into a
RejectionEmitter.

asyncio reports a failed future whose exception nobody retrieved
when the future is garbage collected, through the loop exception
handler. Such a future can never be observed afterwards, so this
adapter only emits unhandled_rejection.

Every other exception-handler context is passed on untouched to
the handler that was installed before, or to the loop default.

Loops are attached when already running, explicitly via attach(), or
when created later through the current event loop policy (which is
what asyncio.run() and asyncio.Runner use). A policy installed after
watch_new_loops() is not watched.
"""

from __future__ import annotations

import asyncio
import logging
import warnings
import weakref
from typing import Any, Dict, Optional

from loud_rejection.events import RejectionEmitter

logger = logging.getLogger("loud_rejection.events")

NEVER_RETRIEVED_SUFFIX = "exception was never retrieved"


def is_never_retrieved(context: Dict[str, Any]) -> bool:
    message = context.get("message") or ""
    return (
        message.endswith(NEVER_RETRIEVED_SUFFIX)
        and context.get("exception") is not None
        and context.get("future") is not None
    )


class AsyncioRejectionSource:
    def __init__(self, emitter: RejectionEmitter) -> None:
        self._emitter = emitter
        self._loops: "weakref.WeakSet[asyncio.AbstractEventLoop]" = weakref.WeakSet()
        self._watched_policies: "weakref.WeakSet[Any]" = weakref.WeakSet()

    def is_attached(self, loop: asyncio.AbstractEventLoop) -> bool:
        return loop in self._loops

    def attach(self, loop: asyncio.AbstractEventLoop) -> bool:
        """
        Install the rejection-aware exception handler on loop.

        Returns False if loop was already attached.
        """
        if self.is_attached(loop):
            return False

        previous = loop.get_exception_handler()

        def handle_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
            if is_never_retrieved(context):
                self._emitter.emit_unhandled(context["exception"], context["future"])
                return
            if previous is not None:
                previous(loop, context)
            else:
                loop.default_exception_handler(context)

        loop.set_exception_handler(handle_exception)
        self._loops.add(loop)
        logger.debug(f"Attached rejection handler to loop {loop!r}")
        return True

    def attach_running(self) -> Optional[asyncio.AbstractEventLoop]:
        """Attach the running loop, if there is one."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        self.attach(loop)
        return loop

    def watch_new_loops(self) -> bool:
        """
        Attach every loop the current event loop policy creates from now on.

        Returns False if that policy is already watched.
        """
        with warnings.catch_warnings():
            # get_event_loop_policy() is deprecated from Python 3.14 on.
            warnings.simplefilter("ignore", DeprecationWarning)
            policy = asyncio.get_event_loop_policy()

        if policy in self._watched_policies:
            return False

        create_loop = policy.new_event_loop

        def new_event_loop() -> asyncio.AbstractEventLoop:
            loop = create_loop()
            self.attach(loop)
            return loop

        # asyncio has no loop-created hook; the bound method is shadowed
        # on this policy instance only.
        policy.new_event_loop = new_event_loop
        self._watched_policies.add(policy)
        logger.debug(f"Watching new loops from policy {policy!r}")
        return True
