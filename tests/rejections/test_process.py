"""
End-to-end tests: a child interpreter installs loud rejection, leaves
rejections behind, and exits. Output and exit code are checked from
the outside, the way a shell or CI system would see them.
"""

import os
import signal
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]

WARNING = "WARN: loud rejection called more than once"


def run_child(source: str) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [str(ROOT), env.get("PYTHONPATH")])
    )
    return subprocess.run(
        [sys.executable, "-c", textwrap.dedent(source)],
        capture_output=True,
        text=True,
        cwd=ROOT,
        env=env,
        timeout=60,
    )


# ── Reporting ────────────────────────────────────────────────

class TestReporting:
    def test_no_rejections(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install()
        """)
        assert child.returncode == 0
        assert child.stderr == ""

    def test_one_unhandled_rejection(self):
        child = run_child("""
            import asyncio
            import loud_rejection

            async def main():
                loud_rejection.install()
                future = asyncio.get_running_loop().create_future()
                future.set_exception(ValueError("foo123"))
                del future

            asyncio.run(main())
        """)
        assert "ValueError: foo123" in child.stderr
        assert child.returncode == 1

    def test_two_unhandled_rejections(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install()
            loud_rejection.notify_unhandled(object(), ValueError("foo456"))
            loud_rejection.notify_unhandled(object(), ValueError("bar789"))
        """)
        assert "foo456" in child.stderr
        assert "bar789" in child.stderr
        assert child.stderr.index("foo456") < child.stderr.index("bar789")

    def test_rejection_handled_before_exit(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install()
            a = object()
            loud_rejection.notify_unhandled(a, ValueError("foo123"))
            loud_rejection.notify_handled(a)
        """)
        assert child.stderr == ""
        assert child.returncode == 0

    @pytest.mark.parametrize("handled, reported, hidden", [
        ("a", "bar654", "foo987"),
        ("b", "foo987", "bar654"),
    ])
    def test_two_rejections_one_handled(self, handled, reported, hidden):
        child = run_child(f"""
            import loud_rejection
            loud_rejection.install()
            handles = {{"a": object(), "b": object()}}
            loud_rejection.notify_unhandled(handles["a"], ValueError("foo987"))
            loud_rejection.notify_unhandled(handles["b"], ValueError("bar654"))
            loud_rejection.notify_handled(handles["{handled}"])
        """)
        assert reported in child.stderr
        assert hidden not in child.stderr

    def test_value_rejections(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install()
            loud_rejection.notify_unhandled(object(), "foo123")
            loud_rejection.notify_unhandled(object(), False)
            loud_rejection.notify_unhandled(object(), 0)
            loud_rejection.notify_unhandled(object())
        """)
        assert child.stderr.splitlines() == [
            "Promise rejected with value: foo123",
            "Promise rejected with value: False",
            "Promise rejected with value: 0",
            "Promise rejected no value",
        ]

    def test_warns_if_installed_twice(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install()
            loud_rejection.install()
            loud_rejection.notify_unhandled(object(), "once")
        """)
        assert WARNING in child.stderr
        assert child.stderr.count(WARNING) == 1
        assert child.stderr.count("Promise rejected with value: once") == 1

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_reported_when_terminated_by_signal(self):
        child = run_child("""
            import os
            import signal
            import loud_rejection
            loud_rejection.install()
            loud_rejection.notify_unhandled(object(), "killed")
            os.kill(os.getpid(), signal.SIGTERM)
        """)
        assert "Promise rejected with value: killed" in child.stderr
        assert child.returncode == -signal.SIGTERM


# ── Exit codes ───────────────────────────────────────────────

class TestExitCode:
    def test_defaults_to_one(self):
        child = run_child("""
            import sys
            import loud_rejection
            loud_rejection.install()
            loud_rejection.notify_unhandled(object(), "boo")
            sys.exit(0)
        """)
        assert child.returncode == 1

    def test_can_be_overridden(self):
        child = run_child("""
            import sys
            import loud_rejection
            loud_rejection.install()
            loud_rejection.install(exit_code=20)
            loud_rejection.notify_unhandled(object(), "boo")
            sys.exit(0)
        """)
        assert child.returncode == 20

    def test_nonzero_exit_code_not_overridden(self):
        child = run_child("""
            import sys
            import loud_rejection
            loud_rejection.install(exit_code=20)
            loud_rejection.notify_unhandled(object(), "boo")
            sys.exit(10)
        """)
        assert child.returncode == 10
        assert "boo" in child.stderr

    def test_uncaught_exception_keeps_its_exit_code(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install(exit_code=20)
            loud_rejection.notify_unhandled(object(), "boo")
            raise RuntimeError("crash")
        """)
        assert child.returncode == 1
        assert "RuntimeError: crash" in child.stderr
        assert "Promise rejected with value: boo" in child.stderr

    def test_caught_sys_exit_code_is_kept(self):
        child = run_child("""
            import sys
            import loud_rejection
            loud_rejection.install()
            try:
                sys.exit(2)
            except SystemExit:
                pass
            loud_rejection.notify_unhandled(object(), "boo")
        """)
        assert "Promise rejected with value: boo" in child.stderr
        assert child.returncode == 2

    def test_exit_status_exit_is_respected(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install(exit_code=20)
            loud_rejection.notify_unhandled(object(), "boo")
            loud_rejection.get_default().exit_status.exit(10)
        """)
        assert "boo" in child.stderr
        assert child.returncode == 10

    def test_bare_system_exit_outside_run_is_not_seen(self):
        # Only run() catches SystemExit itself; the override wins here.
        child = run_child("""
            import loud_rejection
            loud_rejection.install(exit_code=20)
            loud_rejection.notify_unhandled(object(), "boo")
            raise SystemExit(10)
        """)
        assert child.returncode == 20

    def test_negative_exit_code_throws(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install(exit_code=-1)
        """)
        assert child.returncode > 0
        assert "opts.exitCode can't be a negative number" in child.stderr

    def test_conflicting_exit_codes_throw(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install(exit_code=2)
            loud_rejection.install(exit_code=3)
        """)
        assert child.returncode > 0
        assert "two callers have tried to modify the exit code" in child.stderr

    def test_same_exit_code_twice_is_fine(self):
        child = run_child("""
            import loud_rejection
            loud_rejection.install(exit_code=2)
            loud_rejection.install(exit_code=2)
        """)
        assert child.returncode == 0
        assert "two callers" not in child.stderr


# ── run() ────────────────────────────────────────────────────

class TestRunEntryPoint:
    def test_async_main_with_abandoned_task(self):
        child = run_child("""
            import asyncio
            import loud_rejection

            async def boom():
                raise RuntimeError("bar789")

            async def main():
                asyncio.get_running_loop().create_task(boom())
                await asyncio.sleep(0.01)

            loud_rejection.run(main)
        """)
        assert "RuntimeError: bar789" in child.stderr
        assert child.returncode == 1

    def test_raise_system_exit_is_respected(self):
        child = run_child("""
            import loud_rejection

            def main():
                loud_rejection.notify_unhandled(object(), "boo")
                raise SystemExit(10)

            loud_rejection.run(main, exit_code=20)
        """)
        assert child.returncode == 10

    def test_exit_imported_before_install(self):
        child = run_child("""
            from sys import exit
            import loud_rejection

            def main():
                loud_rejection.notify_unhandled(object(), "boo")
                exit(10)

            loud_rejection.run(main, exit_code=20)
        """)
        assert child.returncode == 10


# ── Loops created after install() ────────────────────────────

class TestLaterLoops:
    def test_install_then_asyncio_run(self):
        child = run_child("""
            import asyncio
            import gc
            import loud_rejection

            async def boom():
                raise RuntimeError("bar789")

            async def main():
                asyncio.get_running_loop().create_task(boom())
                await asyncio.sleep(0.01)

            loud_rejection.install()
            asyncio.run(main())
            gc.collect()
        """)
        assert "RuntimeError: bar789" in child.stderr
        assert child.returncode == 1
