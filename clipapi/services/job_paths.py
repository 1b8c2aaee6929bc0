import os
import time
import uuid
from dataclasses import dataclass
from typing import Optional

INTERMEDIATE_PREFIX = "temp-muxed-"
FINAL_PREFIX = "clip-"
FINAL_EXT = ".mp4"


def new_token() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


@dataclass
class JobPaths:
    token: str
    uploads_dir: str
    intermediate_base: str
    final_path: str
    intermediate_path: Optional[str] = None
    completed: bool = False

    @property
    def part_path(self) -> str:
        return self.final_path + ".part"


def new_job_paths(uploads_dir: str, token: Optional[str] = None) -> JobPaths:
    token = token or new_token()
    return JobPaths(
        token=token,
        uploads_dir=uploads_dir,
        intermediate_base=os.path.join(uploads_dir, f"{INTERMEDIATE_PREFIX}{token}"),
        final_path=os.path.join(uploads_dir, f"{FINAL_PREFIX}{token}{FINAL_EXT}"),
    )
