from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from zipbackup.models import FileEntry

logger = logging.getLogger(__name__)


def _log_list_error(err: OSError) -> None:
    # unreadable directory contributes zero files
    logger.debug("Skipping unreadable directory %s (%s)", err.filename, err.strerror)


def iter_tree(root: Path, follow_symlinks: bool = True) -> Iterator[Tuple[str, List[str]]]:
    """
    Yield (dir relative to root in "/" form, sorted file names) depth-first.
    Files of a directory come before its subdirectories.

    Symlinked directories are descended into; a directory whose real path
    was already visited (link cycles, two links to one target) is skipped.
    """
    visited = {os.path.realpath(root)}
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_list_error, followlinks=follow_symlinks):
        # Sort + prune in-place so os.walk descends in a reproducible order
        keep = []
        for d in sorted(dirnames):
            real = os.path.realpath(os.path.join(dirpath, d))
            if real in visited:
                logger.debug("Skipping already visited directory %s", os.path.join(dirpath, d))
                continue
            visited.add(real)
            keep.append(d)
        dirnames[:] = keep

        rel_dir = Path(dirpath).relative_to(root).as_posix()
        yield ("" if rel_dir == "." else rel_dir), sorted(filenames)


def count_files(root: str, follow_symlinks: bool = True) -> int:
    root_path = Path(root)
    return sum(len(names) for _, names in iter_tree(root_path, follow_symlinks))


def collect_entries(
    root: str,
    base_name: Optional[str] = None,
    follow_symlinks: bool = True,
) -> List[FileEntry]:
    """
    List every file under root as FileEntry values.

    relpath is rooted at base_name (default: the root folder's own name),
    so "staging/sub/b.txt" for root=".../staging".
    """
    root_path = Path(root)
    base = base_name if base_name is not None else root_path.name

    entries: List[FileEntry] = []
    for rel_dir, names in iter_tree(root_path, follow_symlinks):
        prefix = "/".join(p for p in (base, rel_dir) if p)
        for fn in names:
            entries.append(
                FileEntry(
                    path=str(root_path / rel_dir / fn),
                    relpath=f"{prefix}/{fn}" if prefix else fn,
                )
            )
    return entries
