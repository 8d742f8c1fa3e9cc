"""
Loud Rejection - Installation Guard
=====================================
Wires ledger, reconciler, reporter and teardown together, once.

State machine:
  UNINSTALLED → INSTALLED   (terminal for the process lifetime)

install(exit_code=None):
1. Validate exit_code (type, then sign)
2. Negotiate it with earlier callers (conflict → error)
3. Already installed → warn with the caller's stack, stop
4. Subscribe the reconciler, register the reporter for teardown,
   attach the running asyncio loop if there is one, and attach the
   loops asyncio.run() creates later

Exit-code errors therefore win over the installed-twice warning.

The process singleton is created on first use and never reset.
Tests build their own LoudRejection with a ManualTeardown instead.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from threading import Lock
from typing import Any, Optional, TextIO

from loud_rejection.arbiter import ExitCodeArbiter, LoudRejectionOptions
from loud_rejection.asyncio_source import AsyncioRejectionSource
from loud_rejection.events import RejectionEmitter
from loud_rejection.formatting import NO_VALUE
from loud_rejection.ledger import RejectionLedger
from loud_rejection.reconciler import EventReconciler
from loud_rejection.reporter import ExitReporter
from loud_rejection.teardown import ExitStatus, ProcessTeardown, TeardownHook

logger = logging.getLogger("loud_rejection.install")

INSTALLED_TWICE_WARNING = "WARN: loud rejection called more than once"


class InstallState(Enum):
    UNINSTALLED = "UNINSTALLED"
    INSTALLED = "INSTALLED"


class LoudRejection:
    """
    One installation of loud rejection reporting.

    Collaborators are injectable; defaults are the real process ones.
    watch_new_loops=False keeps the global event loop policy untouched.
    """

    def __init__(
        self,
        *,
        emitter: Optional[RejectionEmitter] = None,
        exit_status: Optional[ExitStatus] = None,
        teardown: Optional[TeardownHook] = None,
        stream: Optional[TextIO] = None,
        watch_new_loops: bool = True,
    ) -> None:
        self.exit_status = exit_status if exit_status is not None else ExitStatus()
        self.teardown = (
            teardown if teardown is not None else ProcessTeardown(self.exit_status)
        )
        self.emitter = emitter if emitter is not None else RejectionEmitter()
        self.ledger = RejectionLedger()
        self.arbiter = ExitCodeArbiter()
        self.asyncio_source = AsyncioRejectionSource(self.emitter)
        self._stream = stream
        self._watch_new_loops = watch_new_loops
        self._state = InstallState.UNINSTALLED
        self._reporter: Optional[ExitReporter] = None

    @property
    def state(self) -> InstallState:
        return self._state

    @property
    def installed(self) -> bool:
        return self._state is InstallState.INSTALLED

    @property
    def reporter(self) -> Optional[ExitReporter]:
        return self._reporter

    def install(self, exit_code: Optional[int] = None) -> None:
        """
        Install reporting, or just negotiate exit_code if already installed.

        Raises:
            InvalidExitCodeError:     exit_code is not an int
            NegativeExitCodeError:    exit_code < 0
            ConflictingExitCodeError: another caller chose a different code
        """
        self.arbiter.negotiate(LoudRejectionOptions(exit_code=exit_code))

        if self.installed:
            logger.warning(INSTALLED_TWICE_WARNING, stack_info=True)
            return

        self._wire()

    def ensure_installed(self, exit_code: Optional[int] = None) -> None:
        """Like install(), but silent when already installed."""
        self.arbiter.negotiate(LoudRejectionOptions(exit_code=exit_code))
        if not self.installed:
            self._wire()

    def _wire(self) -> None:
        self._state = InstallState.INSTALLED

        EventReconciler(self.ledger).subscribe(self.emitter)
        self._reporter = ExitReporter(
            self.ledger, self.arbiter, self.exit_status, stream=self._stream
        )
        self.teardown.register(self._reporter)
        loop = self.asyncio_source.attach_running()
        if self._watch_new_loops:
            self.asyncio_source.watch_new_loops()

        logger.debug(
            f"Loud rejection installed "
            f"(exit code override: {self.arbiter.negotiated_exit_code}, "
            f"running loop attached: {loop is not None})"
        )


# ══════════════════════════════════════════════════════════════
# PROCESS SINGLETON
# ══════════════════════════════════════════════════════════════

_default: Optional[LoudRejection] = None
_default_lock = Lock()


def get_default() -> LoudRejection:
    """The process-wide installation, created on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = LoudRejection()
        return _default


def install(exit_code: Optional[int] = None) -> None:
    """Install loud rejection reporting for this process."""
    get_default().install(exit_code=exit_code)


def attach_loop(loop: asyncio.AbstractEventLoop) -> bool:
    """Report never-retrieved exceptions from loop as well."""
    return get_default().asyncio_source.attach(loop)


def notify_unhandled(handle: Any, reason: Any = NO_VALUE) -> None:
    """Report handle as rejected with reason and not yet handled."""
    get_default().emitter.emit_unhandled(reason, handle)


def notify_handled(handle: Any) -> None:
    """Report that handle, previously unhandled, has been handled."""
    get_default().emitter.emit_handled(handle)
