from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from zipbackup.config import COPY_BUFFER_SIZE
from zipbackup.core.progress import ProgressCallback, ProgressCounter
from zipbackup.core.walker import count_files, iter_tree
from zipbackup.errors import FileCopyError

logger = logging.getLogger(__name__)


def _copy_file(src: Path, dst: Path, buffer_size: int = COPY_BUFFER_SIZE) -> None:
    """
    Streaming copy through a fixed-size buffer (never loads the whole file).
    An existing dst is overwritten.
    """
    with open(src, "rb") as fsrc, open(dst, "wb") as fdst:
        shutil.copyfileobj(fsrc, fdst, buffer_size)


def copy_tree(
    source_root: str,
    dest_root: str,
    progress_cb: Optional[ProgressCallback] = None,
) -> int:
    """
    Mirror every file under source_root into dest_root, same relative paths.

    Returns the number of files copied. The first file that fails raises
    FileCopyError and the remaining files are not copied.
    """
    src_root = Path(source_root)
    dst_root = Path(dest_root)

    total = count_files(source_root)
    progress = ProgressCounter(total, progress_cb)
    logger.info("Copying %d file(s): %s -> %s", total, src_root, dst_root)

    for rel_dir, names in iter_tree(src_root):
        dst_dir = dst_root / rel_dir
        try:
            dst_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileCopyError(rel_dir or ".", e) from e

        for fn in names:
            relpath = f"{rel_dir}/{fn}" if rel_dir else fn
            try:
                _copy_file(src_root / rel_dir / fn, dst_dir / fn)
            except OSError as e:
                logger.error("Copy failed for %s: %s", relpath, e)
                raise FileCopyError(relpath, e) from e
            progress.advance()

    logger.info("Copy done: %d file(s)", progress.value)
    return progress.value
