import time

import pytest

from clipapi.core.errors import ProcessTimeoutError, SpawnError
from clipapi.services.process import ProcessOutcome, run_streaming


def test_streams_lines_and_waits_for_exit(make_tool):
    tool = make_tool("talk", """
        echo one
        echo oops >&2
        echo two
        exit 3
    """)
    seen = []
    outcome = run_streaming([tool], name="talk", on_stdout=seen.append)

    assert outcome.exit_code == 3
    assert seen == ["one", "two"]
    assert outcome.stdout == "one\ntwo\n"
    assert outcome.stderr == "oops\n"


def test_missing_binary_is_spawn_error(tmp_path):
    with pytest.raises(SpawnError) as exc:
        run_streaming([str(tmp_path / "does-not-exist")], name="ghost")
    assert "Failed to start ghost" in str(exc.value)


def test_timeout_kills_process(make_tool):
    tool = make_tool("hang", """
        echo started
        sleep 30
    """)
    started = time.monotonic()
    with pytest.raises(ProcessTimeoutError) as exc:
        run_streaming([tool], name="hang", timeout=0.5)
    assert "timed out" in str(exc.value)
    # the sleep child holds the pipes open; returning early means it died too
    assert time.monotonic() - started < 10


def test_stderr_tail_keeps_the_end():
    outcome = ProcessOutcome(1, "", "a" * 50 + "END\n")
    tail = outcome.stderr_tail(limit=10)
    assert tail.endswith("END")
    assert len(tail) == 11
    assert ProcessOutcome(0, "", "short\n").stderr_tail(limit=10) == "short"


def test_failing_line_handler_keeps_draining(make_tool):
    tool = make_tool("chatty", """
        echo a
        echo b
        echo c
    """)

    def explode(line):
        raise ValueError(line)

    outcome = run_streaming([tool], name="chatty", on_stdout=explode, timeout=30)
    assert outcome.exit_code == 0
    assert outcome.stdout == "a\nb\nc\n"
