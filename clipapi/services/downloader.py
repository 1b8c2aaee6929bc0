import logging
import os
import re
from typing import List, Optional

from clipapi.core.config import (
    PROCESS_TIMEOUT,
    YTDLP_BIN,
    YTDLP_FORMAT,
    YTDLP_MERGE_FORMAT,
    YTDLP_REFERER,
    YTDLP_USER_AGENT,
)
from clipapi.core.errors import MissingOutputError, ProcessFailedError
from clipapi.services.process import run_streaming

logger = logging.getLogger(__name__)

# yt-dlp announces where it writes in several ways depending on version,
# format selection and whether a merge happens. Last match wins.
DESTINATION_PATTERNS = [
    re.compile(r"^\[download\] Destination: (?P<path>.+)$"),
    re.compile(r'^\[Merger\] Merging formats into "(?P<path>.+)"$'),
    re.compile(r"^\[download\] (?P<path>.+) has already been downloaded"),
]

PARTIAL_SUFFIXES = (".part", ".ytdl", ".temp")

# unmerged per-format file, e.g. temp-muxed-1.f137.mp4
FORMAT_ID_RE = re.compile(r"\.f\d+\.[^.]+$")


def section_selector(start_time: str, end_time: str) -> str:
    return f"*{start_time}-{end_time}"


def build_command(url: str, output_base: str, start_time: str, end_time: str,
                  ytdlp_bin: Optional[str] = None) -> List[str]:
    return [
        ytdlp_bin or YTDLP_BIN,
        url,
        "-f", YTDLP_FORMAT,
        "--download-sections", section_selector(start_time, end_time),
        "-o", output_base + ".%(ext)s",
        "--no-check-certificates",
        "--no-warnings",
        "--add-header", f"referer:{YTDLP_REFERER}",
        "--add-header", f"user-agent:{YTDLP_USER_AGENT}",
        "--merge-output-format", YTDLP_MERGE_FORMAT,
        "--verbose",
    ]


class DestinationTracker:
    """Collects destination announcements that belong to ``output_base``."""

    def __init__(self, output_base: str):
        self.output_base = output_base
        self.detected: Optional[str] = None

    def feed(self, line: str) -> None:
        for pattern in DESTINATION_PATTERNS:
            m = pattern.match(line.strip())
            if not m:
                continue
            path = m.group("path").strip()
            if path.startswith(self.output_base):
                logger.info("Detected download destination: %s", path)
                self.detected = path
            return


def find_by_prefix(directory: str, output_base: str) -> Optional[str]:
    """
    Fallback when stdout gave nothing usable: first finished file in
    ``directory`` named ``<basename(output_base)>.*``. Merged files win over
    per-format leftovers.
    """
    prefix = os.path.basename(output_base) + "."
    try:
        names = sorted(
            os.listdir(directory),
            key=lambda n: (bool(FORMAT_ID_RE.search(n)), n),
        )
    except OSError as exc:
        logger.error("Could not list %s: %s", directory, exc)
        return None

    for name in names:
        if not name.startswith(prefix) or name.endswith(PARTIAL_SUFFIXES):
            continue
        full = os.path.join(directory, name)
        if os.path.isfile(full):
            return full
    return None


def fetch_segment(url: str, output_base: str, start_time: str, end_time: str,
                  ytdlp_bin: Optional[str] = None,
                  timeout: Optional[float] = None) -> str:
    """
    Download only ``start_time``-``end_time`` of ``url`` next to
    ``output_base`` and return the path of the produced file.
    """
    tracker = DestinationTracker(output_base)
    cmd = build_command(url, output_base, start_time, end_time, ytdlp_bin)

    outcome = run_streaming(
        cmd,
        name="yt-dlp",
        on_stdout=tracker.feed,
        timeout=PROCESS_TIMEOUT if timeout is None else timeout,
    )

    if outcome.exit_code != 0:
        logger.error("yt-dlp exited with code %s", outcome.exit_code)
        raise ProcessFailedError(
            f"yt-dlp download failed with code {outcome.exit_code}. "
            f"Stderr: {outcome.stderr_tail()}",
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
            ctx={"url": url},
        )

    if tracker.detected and os.path.isfile(tracker.detected):
        logger.info("yt-dlp download successful: %s", tracker.detected)
        return tracker.detected

    logger.info("Could not determine output file from stdout, searching %s",
                os.path.dirname(output_base))
    found = find_by_prefix(os.path.dirname(output_base) or ".", output_base)
    if found:
        logger.info("Found downloaded file by searching: %s", found)
        return found

    logger.error("yt-dlp exited with code 0 but no output file was found")
    raise MissingOutputError(
        "yt-dlp indicated success, but no output file was found. "
        f"Stderr: {outcome.stderr_tail()}",
        ctx={"url": url, "output_base": output_base},
    )
