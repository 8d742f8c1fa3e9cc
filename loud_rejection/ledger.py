"""
Loud Rejection - Rejection Ledger
===================================
Ordered set of rejections that are currently unhandled.

Rules:
- One entry per promise handle (identity, never equality)
- Insertion order is the order rejections were first observed
- Handles are opaque: stored and compared, never inspected
- Not synchronized; callers mutate it from a single logical thread

This module does NOT:
- Print anything
- Touch the exit code
- Know where events come from
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class LedgerEntry:
    """
    One unhandled rejection.

    Fields:
        reason: Value the promise was rejected with (any type, may be NO_VALUE).
        handle: Opaque promise identity.
    """

    reason: Any
    handle: Any


class RejectionLedger:
    """
    Promises observed as rejected with no handled event since.

    Keyed by id(handle). The entry keeps the handle alive, so an id
    cannot be reused by another object while it is recorded.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, LedgerEntry] = {}

    def record(self, handle: Any, reason: Any) -> bool:
        """
        Append an entry for handle unless one is already present.

        Returns True when a new entry was added.
        """
        key = id(handle)
        existing = self._entries.get(key)
        if existing is not None and existing.handle is handle:
            return False

        self._entries[key] = LedgerEntry(reason=reason, handle=handle)
        return True

    def remove(self, handle: Any) -> bool:
        """
        Delete the entry for handle. No-op if absent.

        Returns True when an entry was removed.
        """
        key = id(handle)
        existing = self._entries.get(key)
        if existing is None or existing.handle is not handle:
            return False

        del self._entries[key]
        return True

    def drain(self) -> List[LedgerEntry]:
        """Return every entry in insertion order and empty the ledger."""
        entries = list(self._entries.values())
        self._entries.clear()
        return entries

    def snapshot(self) -> Tuple[LedgerEntry, ...]:
        """Entries in insertion order, without emptying the ledger."""
        return tuple(self._entries.values())

    def __contains__(self, handle: Any) -> bool:
        existing = self._entries.get(id(handle))
        return existing is not None and existing.handle is handle

    def __len__(self) -> int:
        return len(self._entries)
