"""
Loud Rejection - Process Teardown
===================================
"Run this callback exactly once before the process terminates."

ProcessTeardown covers:
- Normal interpreter exit (atexit)
- SIGHUP / SIGTERM / SIGQUIT, when their handler is still the default
  (callbacks fire, then the signal is re-delivered with the default
  disposition so the process still dies by that signal)

ExitStatus is the process exit code as the application assigned it.
ProcessTeardown keeps it current by wrapping sys.exit() and
sys.excepthook. When a callback enforces the status during atexit,
the interpreter is terminated with that code.

A bare `raise SystemExit(n)`, or an `exit` imported from sys before
install(), never passes through the wrapper, so the atexit path cannot
see n. Entry points that leave that way should go through
loud_rejection.run(), which catches SystemExit itself.
"""

from __future__ import annotations

import atexit
import contextlib
import logging
import os
import signal
import sys
import threading
from typing import Callable, List, Optional, Protocol, Sequence

logger = logging.getLogger("loud_rejection.teardown")

HANDLED_SIGNALS = ("SIGHUP", "SIGTERM", "SIGQUIT")

TeardownCallback = Callable[[], None]


def exit_code_from(exc: SystemExit) -> int:
    """Exit code the interpreter would use for this SystemExit."""
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return int(code)
    # sys.exit("message") prints the message and exits with 1
    return 1


# ══════════════════════════════════════════════════════════════
# EXIT STATUS
# ══════════════════════════════════════════════════════════════

class ExitStatus:
    """
    Assignable process exit code.

    code is None until something assigns it. A positive code is an
    application failure and is never overwritten by the reporter.

    enforced is set once unhandled rejections were reported: from then
    on code is the exit code the process must end with.
    """

    def __init__(self, code: Optional[int] = None) -> None:
        self.code = code
        self.enforced = False

    @property
    def is_failure(self) -> bool:
        return self.code is not None and self.code > 0

    def mark_failed(self) -> None:
        """Record a generic failure unless a failure code is already set."""
        if not self.is_failure:
            self.code = 1

    def exit(self, code: Optional[int] = None) -> None:
        """Assign code (when given) and leave via SystemExit."""
        if code is not None:
            self.code = code
        raise SystemExit(self.code or 0)


# ══════════════════════════════════════════════════════════════
# TEARDOWN HOOKS
# ══════════════════════════════════════════════════════════════

class TeardownHook(Protocol):
    """Injectable "run once before exit" capability."""

    def register(self, callback: TeardownCallback) -> None:
        ...  # pragma: no cover

    def fire(self) -> bool:
        """Run the callbacks now, unless they already ran."""
        ...  # pragma: no cover


class _CallbackList:
    def __init__(self) -> None:
        self._callbacks: List[TeardownCallback] = []
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def callbacks(self) -> tuple:
        return tuple(self._callbacks)

    def register(self, callback: TeardownCallback) -> None:
        if self._fired:
            logger.debug("Teardown already fired; late callback will not run.")
        self._callbacks.append(callback)

    def fire(self) -> bool:
        """
        Run every callback in registration order, at most once.

        Returns False if teardown had already fired.
        """
        if self._fired:
            return False
        self._fired = True

        for callback in self._callbacks:
            name = getattr(callback, "__qualname__", repr(callback))
            try:
                callback()
            except Exception as exc:
                logger.error(f"Teardown callback failed: {name}: {exc}", exc_info=True)
        return True


class ManualTeardown(_CallbackList):
    """
    Test teardown. Fires only when told to.

    Usage:
        teardown = ManualTeardown()
        loud = LoudRejection(teardown=teardown, ...)
        teardown.fire()
    """


class ProcessTeardown(_CallbackList):
    """Production teardown: atexit plus fatal-signal handlers."""

    def __init__(
        self,
        exit_status: ExitStatus,
        signals: Sequence[str] = HANDLED_SIGNALS,
    ) -> None:
        super().__init__()
        self._exit_status = exit_status
        self._signals = tuple(signals)
        self._hooked = False
        self._original_exit = None
        self._original_excepthook = None

    def register(self, callback: TeardownCallback) -> None:
        super().register(callback)
        if not self._hooked:
            self._hook()

    def _hook(self) -> None:
        self._hooked = True
        atexit.register(self._on_exit)

        # The interpreter exposes no exit-code hook, so sys.exit is replaced.
        # Only calls that look sys.exit up after this point are seen.
        self._original_exit = sys.exit
        sys.exit = self._exit
        self._original_excepthook = sys.excepthook
        sys.excepthook = self._excepthook

        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread; signal handlers not installed.")
            return

        for name in self._signals:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            if signal.getsignal(signum) is not signal.SIG_DFL:
                logger.debug(f"{name} already has a handler; leaving it alone.")
                continue
            signal.signal(signum, self._on_signal)

    def _exit(self, status=None):
        if threading.current_thread() is threading.main_thread():
            self._exit_status.code = exit_code_from(SystemExit(status))
        self._original_exit(status)

    def _excepthook(self, exc_type, exc, tb) -> None:
        self._exit_status.mark_failed()
        self._original_excepthook(exc_type, exc, tb)

    def _on_signal(self, signum, frame) -> None:
        self.fire()
        signal.signal(signum, signal.SIG_DFL)
        os.kill(os.getpid(), signum)

    def _on_exit(self) -> None:
        if not self.fire():
            return

        code = self._exit_status.code
        if not self._exit_status.enforced or not code:
            return

        # The interpreter has already chosen its exit status and may have
        # discarded a caught SystemExit; only a hard exit applies code.
        logging.shutdown()
        for stream in (sys.stdout, sys.stderr):
            if stream is not None:
                with contextlib.suppress(OSError, ValueError):
                    stream.flush()
        os._exit(code)
