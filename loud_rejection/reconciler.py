"""
Loud Rejection - Event Reconciler
===================================
Keeps the ledger equal to "rejected, and not handled since".

- unhandled_rejection(reason, handle) → ledger.record(handle, reason)
- rejection_handled(handle)           → ledger.remove(handle)

Events for distinct promises arrive in any order. A handled event
for a handle that was never recorded is ignored.
"""

from typing import Any

from loud_rejection.events import (
    REJECTION_HANDLED,
    UNHANDLED_REJECTION,
    RejectionEventSource,
)
from loud_rejection.ledger import RejectionLedger


class EventReconciler:
    def __init__(self, ledger: RejectionLedger) -> None:
        self._ledger = ledger

    @property
    def ledger(self) -> RejectionLedger:
        return self._ledger

    def on_unhandled_rejection(self, reason: Any, handle: Any) -> None:
        self._ledger.record(handle, reason)

    def on_rejection_handled(self, handle: Any) -> None:
        self._ledger.remove(handle)

    def subscribe(self, source: RejectionEventSource) -> None:
        """Attach both handlers to source. Call once per source."""
        source.subscribe(UNHANDLED_REJECTION, self.on_unhandled_rejection)
        source.subscribe(REJECTION_HANDLED, self.on_rejection_handled)
