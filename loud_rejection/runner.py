"""
Loud Rejection - Entry Point Runner
=====================================
run(main) for scripts and CLIs.

- Installs reporting (negotiating exit_code)
- Calls main; a returned coroutine is driven on an asyncio.Runner
  whose loop is attached before the coroutine starts
- Records how main left: SystemExit code, or failure for any
  other exception (which then propagates unchanged)
- Fires teardown before returning, so the exit-code policy is applied
  through a normal SystemExit rather than at interpreter shutdown
"""

from __future__ import annotations

import asyncio
import gc
import inspect
from typing import Any, Callable, Coroutine, Optional

from loud_rejection.installer import LoudRejection, get_default
from loud_rejection.teardown import exit_code_from


def _run_coroutine(loud: LoudRejection, coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        with asyncio.Runner() as runner:
            loud.asyncio_source.attach(runner.get_loop())
            return runner.run(coro)
    finally:
        # Failed futures nobody kept a reference to are reported on collection.
        gc.collect()


def run(
    main: Callable[..., Any],
    *args: Any,
    exit_code: Optional[int] = None,
    loud: Optional[LoudRejection] = None,
    **kwargs: Any,
) -> Any:
    """
    Call main(*args, **kwargs) with loud rejection reporting.

    Raises SystemExit with the enforced code when unhandled rejections
    were reported. Use this instead of install() when main may leave
    through a bare `raise SystemExit(n)`.
    """
    if loud is None:
        loud = get_default()
    loud.ensure_installed(exit_code=exit_code)

    status = loud.exit_status
    pending: Optional[SystemExit] = None
    result = None

    try:
        result = main(*args, **kwargs)
        if inspect.iscoroutine(result):
            result = _run_coroutine(loud, result)
    except SystemExit as exc:
        status.code = exit_code_from(exc)
        pending = exc
    except BaseException:
        status.mark_failed()
        raise

    loud.teardown.fire()

    if status.enforced and status.code:
        if pending is None or exit_code_from(pending) != status.code:
            raise SystemExit(status.code)
    if pending is not None:
        raise pending
    return result
