"""
Loud Rejection - Exit-Code Arbiter
====================================
One override exit code per process, agreed by every install() caller.

Rules:
- exit_code must be a non-negative int (bool is not an int here)
- The first caller that supplies a value sets the override
- A later caller may repeat the same value; a different one is an error
- Callers that omit exit_code never conflict with anyone
- With no override, unhandled rejections exit with DEFAULT_EXIT_CODE
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loud_rejection.errors import (
    ConflictingExitCodeError,
    InvalidExitCodeError,
    NegativeExitCodeError,
)

DEFAULT_EXIT_CODE = 1


@dataclass(frozen=True)
class LoudRejectionOptions:
    """
    Options accepted by install().

    exit_code: override for the default failure exit code, or None.
    """

    exit_code: Optional[int] = None

    def __post_init__(self) -> None:
        if self.exit_code is None:
            return
        if isinstance(self.exit_code, bool) or not isinstance(self.exit_code, int):
            raise InvalidExitCodeError(self.exit_code)
        if self.exit_code < 0:
            raise NegativeExitCodeError(self.exit_code)


class ExitCodeArbiter:
    """Holds the negotiated override. Set at most once to a given value."""

    def __init__(self) -> None:
        self._negotiated: Optional[int] = None

    @property
    def negotiated_exit_code(self) -> Optional[int]:
        return self._negotiated

    def negotiate(self, options: LoudRejectionOptions) -> None:
        """
        Agree on options.exit_code.

        Raises:
            ConflictingExitCodeError: a different override is already set
        """
        requested = options.exit_code
        if requested is None:
            return

        if self._negotiated is not None and self._negotiated != requested:
            raise ConflictingExitCodeError(self._negotiated, requested)

        self._negotiated = requested

    def resolve(self) -> int:
        """Exit code to use when unhandled rejections remain at teardown."""
        if self._negotiated is None:
            return DEFAULT_EXIT_CODE
        return self._negotiated
