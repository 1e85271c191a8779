"""File writes for the output directory.

Every published file goes through ``atomic_write`` so an interrupted run
never leaves a half-written page for Quartz to pick up.
"""

import os
import shutil
import threading
from pathlib import Path

import structlog

logger = structlog.get_logger()


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    Parent directories are created as needed. The temporary name includes
    the thread id, so workers writing distinct pages never collide.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}.{threading.get_ident()}"

    try:
        temp_path.write_text(content, encoding="utf-8")
        temp_path.replace(path)
        logger.debug("atomic_write_success", path=str(path), size=len(content))

    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise


def copy_tree(source: Path, destination: Path) -> int:
    """Copy every file below ``source`` into ``destination``.

    Returns:
        Number of files copied
    """
    count = 0
    for path in sorted(source.rglob("*")):
        if not path.is_file():
            continue
        target = destination / path.relative_to(source)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        count += 1
    logger.debug("tree_copied", source=str(source), files=count)
    return count
