"""
Loud Rejection - Public API
=============================
Rejections nobody observed are printed at exit, and the exit code
becomes nonzero unless it already is.
"""

from loud_rejection.arbiter import (
    DEFAULT_EXIT_CODE,
    ExitCodeArbiter,
    LoudRejectionOptions,
)
from loud_rejection.errors import (
    ConfigurationError,
    ConflictingExitCodeError,
    DuplicateSubscriberError,
    EventSourceError,
    InvalidExitCodeError,
    LoudRejectionError,
    NegativeExitCodeError,
    UnknownChannelError,
)
from loud_rejection.events import (
    REJECTION_HANDLED,
    UNHANDLED_REJECTION,
    RejectionEmitter,
    RejectionEventSource,
)
from loud_rejection.formatting import NO_VALUE, format_rejection
from loud_rejection.installer import (
    LoudRejection,
    attach_loop,
    get_default,
    install,
    notify_handled,
    notify_unhandled,
)
from loud_rejection.ledger import LedgerEntry, RejectionLedger
from loud_rejection.runner import run
from loud_rejection.teardown import (
    ExitStatus,
    ManualTeardown,
    ProcessTeardown,
    TeardownHook,
)

__all__ = [
    "install",
    "run",
    "attach_loop",
    "notify_unhandled",
    "notify_handled",
    "get_default",
    "LoudRejection",
    "LoudRejectionOptions",
    "NO_VALUE",
    "DEFAULT_EXIT_CODE",
    "UNHANDLED_REJECTION",
    "REJECTION_HANDLED",
    "RejectionEmitter",
    "RejectionEventSource",
    "RejectionLedger",
    "LedgerEntry",
    "ExitCodeArbiter",
    "ExitStatus",
    "TeardownHook",
    "ProcessTeardown",
    "ManualTeardown",
    "format_rejection",
    "LoudRejectionError",
    "ConfigurationError",
    "InvalidExitCodeError",
    "NegativeExitCodeError",
    "ConflictingExitCodeError",
    "EventSourceError",
    "UnknownChannelError",
    "DuplicateSubscriberError",
]
