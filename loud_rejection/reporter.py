"""
Loud Rejection - Exit Reporter
================================
Teardown callback. Runs once, synchronously.

1. Drain the ledger
2. Nothing left → no output, exit code untouched
3. Write one message per entry, in recorded order, to stderr
4. Exit code: an existing positive code wins; otherwise the
   negotiated override, otherwise 1. The status is then marked
   enforced, so teardown applies it even if the application
   swallowed the SystemExit that set it

Writes go straight to the stream and are flushed. Nothing here may
defer work past teardown.
"""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from loud_rejection.arbiter import ExitCodeArbiter
from loud_rejection.formatting import format_rejection
from loud_rejection.ledger import RejectionLedger
from loud_rejection.teardown import ExitStatus


class ExitReporter:
    def __init__(
        self,
        ledger: RejectionLedger,
        arbiter: ExitCodeArbiter,
        exit_status: ExitStatus,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._ledger = ledger
        self._arbiter = arbiter
        self._exit_status = exit_status
        self._stream = stream
        self._reported = False

    @property
    def reported(self) -> bool:
        return self._reported

    def __call__(self) -> int:
        """
        Report remaining rejections.

        Returns the number of rejections reported. A second call
        reports nothing.
        """
        if self._reported:
            return 0
        self._reported = True

        entries = self._ledger.drain()
        if not entries:
            return 0

        # sys.stderr is looked up at report time, not at install time.
        stream = self._stream if self._stream is not None else sys.stderr
        for entry in entries:
            stream.write(format_rejection(entry.reason) + "\n")
        stream.flush()

        if not self._exit_status.is_failure:
            self._exit_status.code = self._arbiter.resolve()
        self._exit_status.enforced = True

        return len(entries)
