"""
Loud Rejection - Message Formatting
=====================================
Turns a rejection reason into the line(s) printed at teardown.

Message forms:
- Exception:        its formatted traceback, verbatim
- No value:         "Promise rejected no value"
- Any other value:  "Promise rejected with value: <display form>"

Falsy values (False, 0, "", None) are values, not "no value".
"""

from __future__ import annotations

import traceback
from typing import Any


class _NoValue:
    """Sentinel for a rejection that carried no value at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_NoValue, ())


NO_VALUE = _NoValue()

NO_VALUE_MESSAGE = "Promise rejected no value"
VALUE_MESSAGE_PREFIX = "Promise rejected with value:"


def display_value(value: Any) -> str:
    """Strings print unquoted; everything else prints as its repr."""
    if isinstance(value, str):
        return value
    return repr(value)


def format_rejection(reason: Any) -> str:
    """Render one rejection reason as report text (no trailing newline)."""
    if reason is NO_VALUE:
        return NO_VALUE_MESSAGE

    if isinstance(reason, BaseException):
        lines = traceback.format_exception(
            type(reason), reason, reason.__traceback__
        )
        return "".join(lines).rstrip("\n")

    return f"{VALUE_MESSAGE_PREFIX} {display_value(reason)}"
