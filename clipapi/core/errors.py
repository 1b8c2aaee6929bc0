from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any


class ErrCode(str, Enum):
    INPUT = "INPUT"
    SPAWN = "SPAWN"
    PROCESS = "PROCESS"
    NO_OUTPUT = "NO_OUTPUT"
    TIMEOUT = "TIMEOUT"


class ClipError(RuntimeError):
    """
    Pipeline error with a code and structured context.
    """

    code = ErrCode.PROCESS

    def __init__(self, message: str, *, ctx: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.ctx: dict[str, Any] = dict(ctx or {})


class ClipInputError(ClipError):
    code = ErrCode.INPUT


class SpawnError(ClipError):
    """The external binary could not be launched."""

    code = ErrCode.SPAWN


class ProcessFailedError(ClipError):
    """The external process exited with a non-zero code."""

    code = ErrCode.PROCESS

    def __init__(self, message: str, *, exit_code: int, stderr: str = "",
                 ctx: Mapping[str, Any] | None = None) -> None:
        super().__init__(message, ctx=ctx)
        self.exit_code = exit_code
        self.stderr = stderr


class MissingOutputError(ClipError):
    """Exit code 0 but the expected artifact is missing or empty."""

    code = ErrCode.NO_OUTPUT


class ProcessTimeoutError(ClipError):
    code = ErrCode.TIMEOUT
