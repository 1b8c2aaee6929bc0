"""
Spawning of the external tools with line-by-line output streaming.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import signal
import subprocess
import threading
from typing import Callable, List, Optional

from clipapi.core.config import STDERR_TAIL
from clipapi.core.errors import ProcessTimeoutError, SpawnError

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]


@dataclass
class ProcessOutcome:
    exit_code: int
    stdout: str
    stderr: str

    def stderr_tail(self, limit: Optional[int] = None) -> str:
        limit = STDERR_TAIL if limit is None else limit
        text = self.stderr.strip()
        if limit and len(text) > limit:
            return "…" + text[-limit:]
        return text


def _pump(stream, sink: List[str], label: str, on_line: Optional[LineCallback]) -> None:
    try:
        for line in stream:
            sink.append(line)
            logger.debug("%s: %s", label, line.rstrip())
            if on_line is None:
                continue
            try:
                on_line(line.rstrip("\n"))
            except Exception:
                logger.exception("%s: line handler failed", label)
    finally:
        stream.close()


def _kill_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_streaming(
    cmd: List[str],
    *,
    name: str,
    on_stdout: Optional[LineCallback] = None,
    timeout: Optional[float] = None,
) -> ProcessOutcome:
    """
    Run ``cmd`` and stream both output pipes while it runs.

    The outcome is returned only once the process has exited AND both pipes
    have been drained. ``timeout`` (seconds, falsy = unbounded) kills the whole
    process group and raises ProcessTimeoutError.
    """
    logger.info("Executing %s: %s", name, " ".join(cmd))
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            bufsize=1,
            start_new_session=True,
        )
    except OSError as exc:
        logger.error("Failed to start %s: %s", name, exc)
        raise SpawnError(
            f"Failed to start {name}: {exc.strerror or exc}",
            ctx={"cmd": cmd},
        ) from exc

    stdout_lines: List[str] = []
    stderr_lines: List[str] = []
    pumps = [
        threading.Thread(
            target=_pump,
            args=(proc.stdout, stdout_lines, f"{name} stdout", on_stdout),
            daemon=True,
        ),
        threading.Thread(
            target=_pump,
            args=(proc.stderr, stderr_lines, f"{name} stderr", None),
            daemon=True,
        ),
    ]
    for t in pumps:
        t.start()

    try:
        exit_code = proc.wait(timeout=timeout or None)
    except subprocess.TimeoutExpired:
        logger.error("%s exceeded %ss, killing process group %s", name, timeout, proc.pid)
        _kill_group(proc)
        proc.wait()
        for t in pumps:
            t.join()
        outcome = ProcessOutcome(-1, "".join(stdout_lines), "".join(stderr_lines))
        raise ProcessTimeoutError(
            f"{name} timed out after {timeout}s. Stderr: {outcome.stderr_tail()}",
            ctx={"cmd": cmd, "timeout": timeout},
        )

    for t in pumps:
        t.join()

    return ProcessOutcome(exit_code, "".join(stdout_lines), "".join(stderr_lines))
