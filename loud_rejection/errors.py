"""
Loud Rejection - Errors
=========================
Error types raised by the installer and the rejection event source.

Configuration errors are programmer errors. They are raised
synchronously from install() and are never deferred to teardown.
"""


class LoudRejectionError(Exception):
    """Base error for loud_rejection."""
    pass


# ── Configuration ─────────────────────────────────────────────

class ConfigurationError(LoudRejectionError, ValueError):
    """Invalid or conflicting install() options."""
    pass


class InvalidExitCodeError(ConfigurationError):
    """exit_code is not an integer."""

    def __init__(self, exit_code):
        self.exit_code = exit_code
        super().__init__(
            f"loud-rejection: opts.exitCode must be an integer, "
            f"got {type(exit_code).__name__}: {exit_code!r}"
        )


class NegativeExitCodeError(ConfigurationError):
    """exit_code below zero."""

    def __init__(self, exit_code: int):
        self.exit_code = exit_code
        super().__init__(
            f"loud-rejection: opts.exitCode can't be a negative number: "
            f"{exit_code}"
        )


class ConflictingExitCodeError(ConfigurationError):
    """A second caller asked for a different override exit code."""

    def __init__(self, negotiated: int, requested: int):
        self.negotiated = negotiated
        self.requested = requested
        super().__init__(
            f"loud-rejection: two callers have tried to modify the exit "
            f"code: {negotiated}, {requested}"
        )


# ── Event source ──────────────────────────────────────────────

class EventSourceError(LoudRejectionError):
    """Base error for rejection event subscription."""
    pass


class UnknownChannelError(EventSourceError):
    """Channel is neither unhandled_rejection nor rejection_handled."""

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"Unknown rejection channel '{channel}'.")


class DuplicateSubscriberError(EventSourceError):
    """Same handler already subscribed to this channel."""

    def __init__(self, channel: str, handler_name: str):
        self.channel = channel
        self.handler_name = handler_name
        super().__init__(
            f"Handler '{handler_name}' already subscribed "
            f"to channel '{channel}'."
        )
