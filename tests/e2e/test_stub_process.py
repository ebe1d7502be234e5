"""
E2E tests spawning real stub processes.

Validates the observable contract of both variants: the announcement on
stdout, pid agreement with the operating system, exit 0 on SIGINT and
SIGTERM, exit 1 on timeout, and no exit at all for the wait variant.
"""

import os
import time
from pathlib import Path

import pytest

from pidstub.exceptions import HarnessTimeoutError
from pidstub.harness import StubProcess

# Generous bound on how long a signaled stub may take to exit
EXIT_WITHIN = 5.0


@pytest.mark.e2e
class TestAnnouncement:
    """Test what the stub prints."""

    def test_pid_and_args(self):
        with StubProcess(["--flag", "value"]) as proc:
            ann = proc.read_announcement()

            assert ann.pid == proc.pid
            assert Path(ann.argv[0]).name == "__main__.py"
            assert ann.args == ("--flag", "value")

            proc.interrupt()
            assert proc.wait(timeout=EXIT_WITHIN) == 0

            assert proc.output() == [str(proc.pid), ann.argv[0], "--flag", "value"]

    def test_no_args(self):
        with StubProcess() as proc:
            ann = proc.read_announcement()
            proc.interrupt()
            proc.wait(timeout=EXIT_WITHIN)

            assert ann.args == ()
            assert len(proc.output()) == 2

    def test_args_not_interpreted(self):
        args = ["--help", "-h", "--version", "two words", "", "--", "%s"]
        with StubProcess(args) as proc:
            ann = proc.read_announcement()
            proc.terminate()
            assert proc.wait(timeout=EXIT_WITHIN) == 0

            assert list(ann.args) == args
            assert len(proc.output()) == len(args) + 2

    def test_undecodable_argument_echoed_unchanged(self):
        raw = os.fsdecode(b"\xff\xfe")
        env = dict(os.environ, PYTHONIOENCODING="utf-8:strict")

        with StubProcess(["ok", raw], env=env) as proc:
            ann = proc.read_announcement()
            proc.interrupt()
            assert proc.wait(timeout=EXIT_WITHIN) == 0

        assert ann.args == ("ok", raw)

    def test_carriage_return_preserved(self):
        with StubProcess(["a\rb", "c\r"]) as proc:
            ann = proc.read_announcement()
            proc.interrupt()
            proc.wait(timeout=EXIT_WITHIN)

        assert ann.args == ("a\rb", "c\r")

    def test_stdout_carries_nothing_else(self):
        with StubProcess(["a"]) as proc:
            proc.read_announcement()
            proc.interrupt()
            proc.wait(timeout=EXIT_WITHIN)

            assert proc.read_line() is None
            assert len(proc.output()) == 3


@pytest.mark.e2e
@pytest.mark.parametrize("variant", ["timeout", "wait"])
class TestSignals:
    """Test that both signals stop both variants with exit 0."""

    def test_sigint(self, variant):
        with StubProcess(["x"], variant=variant) as proc:
            proc.read_announcement()
            start = time.monotonic()
            proc.interrupt()

            assert proc.wait(timeout=EXIT_WITHIN) == 0
            assert time.monotonic() - start < EXIT_WITHIN

    def test_sigterm(self, variant):
        with StubProcess(["x"], variant=variant) as proc:
            proc.read_announcement()
            proc.terminate()

            assert proc.wait(timeout=EXIT_WITHIN) == 0

    def test_signal_sent_directly_by_pid(self, variant):
        import signal

        with StubProcess(variant=variant) as proc:
            ann = proc.read_announcement()
            os.kill(ann.pid, signal.SIGINT)

            assert proc.wait(timeout=EXIT_WITHIN) == 0


@pytest.mark.e2e
class TestWaitVariant:
    """Test the variant without a timeout."""

    def test_stays_running_until_killed(self):
        with StubProcess(variant="wait") as proc:
            proc.read_announcement()

            with pytest.raises(HarnessTimeoutError):
                proc.wait(timeout=1.0)
            assert proc.running is True

        assert proc.running is False
        assert proc.returncode != 0


@pytest.mark.e2e
@pytest.mark.slow
class TestTimeoutVariant:
    """Test the 10-second timeout path."""

    def test_exits_1_after_timeout(self):
        with StubProcess() as proc:
            proc.read_announcement()
            code = proc.wait(timeout=20.0)
            elapsed = time.monotonic() - proc.announced_at

        assert code == 1
        # The timer starts just before the announcement is read
        assert 9.75 <= elapsed < 15.0
