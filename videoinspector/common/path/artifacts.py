# videoinspector/common/path/artifacts.py
from __future__ import annotations

import itertools
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_seq = itertools.count()


def artifact_path(tmp_dir: Path | str, index: int, suffix: str = ".png", prefix: str = "thumbnail") -> Path:
    """
    Unique scratch path for one tool invocation: nanosecond clock, pid, a
    process-wide sequence number and the caller's index. Nothing is created on disk.
    """
    suffix = suffix if suffix.startswith(".") else f".{suffix}"
    name = f"{prefix}_{time.time_ns()}_{os.getpid()}_{next(_seq)}_{int(index)}{suffix}"
    return Path(tmp_dir) / name


@contextmanager
def temporary_artifact(
    tmp_dir: Path | str, index: int, suffix: str = ".png", prefix: str = "thumbnail"
) -> Iterator[Path]:
    """Yield an artifact path and remove whatever was written there on exit, success or failure."""
    p = artifact_path(tmp_dir, index, suffix=suffix, prefix=prefix)
    try:
        yield p
    finally:
        p.unlink(missing_ok=True)
