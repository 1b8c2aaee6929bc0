import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from clipapi.core.config import UPLOADS_DIR
from clipapi.core.errors import ClipInputError, MissingOutputError
from clipapi.schemas.clips import ClipRequest
from clipapi.services.cleanup import cleanup_job
from clipapi.services.downloader import fetch_segment
from clipapi.services.job_paths import JobPaths, new_job_paths
from clipapi.services.remux import remux

logger = logging.getLogger(__name__)


@contextmanager
def job_scope(uploads_dir: str) -> Iterator[JobPaths]:
    """
    Paths for one job. Cleanup runs when the block exits, whatever the outcome.
    """
    paths = new_job_paths(uploads_dir)
    try:
        yield paths
    finally:
        cleanup_job(paths)


def validate(req: ClipRequest) -> None:
    missing = req.missing_fields()
    if missing:
        raise ClipInputError(
            "URL, startTime and endTime are required",
            ctx={"missing": missing},
        )


def process_clip(req: ClipRequest, uploads_dir: Optional[str] = None) -> str:
    """
    Download the requested segment of ``req.url`` and remux it into the
    final clip. Returns the final clip path.
    """
    validate(req)

    with job_scope(uploads_dir or UPLOADS_DIR) as paths:
        logger.info("Job %s: fetching %s [%s -> %s]",
                    paths.token, req.url, req.start_time, req.end_time)
        logger.info("Job %s: temporary muxed base %s", paths.token, paths.intermediate_base)

        # STEP 1 — partial download
        paths.intermediate_path = fetch_segment(
            req.url,
            paths.intermediate_base,
            req.start_time,
            req.end_time,
        )
        if not paths.intermediate_path:
            raise MissingOutputError("Missing temporary muxed path after download.")

        # STEP 2 — stream-copy remux
        logger.info("Job %s: remuxing %s into %s",
                    paths.token, paths.intermediate_path, paths.final_path)
        remux(paths.intermediate_path, paths.final_path)

        paths.completed = True
        logger.info("Job %s: final clip available at %s", paths.token, paths.final_path)
        return paths.final_path
