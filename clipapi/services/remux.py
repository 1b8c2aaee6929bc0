import logging
import os
from typing import Optional

from clipapi.core.config import FFMPEG_BIN, PROCESS_TIMEOUT
from clipapi.core.errors import MissingOutputError, ProcessFailedError
from clipapi.services.process import run_streaming

logger = logging.getLogger(__name__)


def build_command(src: str, out: str, ffmpeg_bin: Optional[str] = None):
    return [
        ffmpeg_bin or FFMPEG_BIN,
        "-i", src,
        "-c:v", "copy",
        "-c:a", "copy",
        "-y",
        out,
    ]


def remux(src: str, out: str, ffmpeg_bin: Optional[str] = None,
          timeout: Optional[float] = None) -> None:
    """Stream-copy ``src`` into ``out``; the result must be a non-empty file."""
    outcome = run_streaming(
        build_command(src, out, ffmpeg_bin),
        name="ffmpeg",
        timeout=PROCESS_TIMEOUT if timeout is None else timeout,
    )

    if outcome.exit_code != 0:
        logger.error("ffmpeg exited with code %s", outcome.exit_code)
        raise ProcessFailedError(
            f"FFmpeg remux failed with code {outcome.exit_code}. "
            f"Stderr: {outcome.stderr_tail()}",
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
            ctx={"input": src, "output": out},
        )

    if not os.path.isfile(out) or os.path.getsize(out) == 0:
        logger.error("ffmpeg exited with code 0 but output is missing or empty: %s", out)
        raise MissingOutputError(
            "FFmpeg remux failed: output file missing or empty. "
            f"Stderr: {outcome.stderr_tail()}",
            ctx={"input": src, "output": out},
        )

    logger.info("FFmpeg remux successful: %s", out)
