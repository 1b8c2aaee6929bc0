import logging
import os
from typing import List

from clipapi.services.job_paths import JobPaths

logger = logging.getLogger(__name__)


def _candidates(paths: JobPaths) -> List[str]:
    found = []
    if paths.intermediate_path:
        found.append(paths.intermediate_path)

    # whatever yt-dlp left behind for this job: fragments, .part, unmerged formats
    prefix = os.path.basename(paths.intermediate_base) + "."
    try:
        names = sorted(os.listdir(paths.uploads_dir))
    except OSError:
        names = []
    found.extend(os.path.join(paths.uploads_dir, n) for n in names if n.startswith(prefix))

    found.append(paths.part_path)
    if not paths.completed:
        found.append(paths.final_path)

    unique = []
    for p in found:
        if p not in unique:
            unique.append(p)
    return unique


def cleanup_job(paths: JobPaths) -> List[str]:
    """
    Best-effort removal of every transient artifact of a job.

    Safe to call repeatedly; returns the paths actually removed.
    """
    removed = []
    for path in _candidates(paths):
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.error("Failed to delete %s: %s", path, exc)
            continue
        logger.info("Cleaned up %s", path)
        removed.append(path)
    logger.info("Temporary file cleanup finished for job %s", paths.token)
    return removed
