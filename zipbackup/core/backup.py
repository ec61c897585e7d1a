from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from zipbackup.core.archiver import package_tree
from zipbackup.core.backup_log import BackupLog
from zipbackup.core.copier import copy_tree
from zipbackup.core.progress import ProgressCallback
from zipbackup.core.staging import cleanup, is_packaging_ready, staging_root
from zipbackup.errors import (
    FileCopyError,
    MissingStagingDirectory,
    SourceNotFound,
    SourceOrDestinationUnset,
)
from zipbackup.models import CopySummary, PackageSummary

logger = logging.getLogger(__name__)


def next_action(destination_root: str) -> str:
    """Which operation is allowed right now: "copy" or "package"."""
    return "package" if is_packaging_ready(destination_root) else "copy"


def run_copy(
    source_root: str,
    destination_root: str,
    progress_cb: Optional[ProgressCallback] = None,
) -> CopySummary:
    """
    Phase 1: mirror source_root into <destination_root>/staging.

    Raises SourceOrDestinationUnset, SourceNotFound or FileCopyError.
    """
    source_root = (source_root or "").strip()
    destination_root = (destination_root or "").strip()
    if not source_root or not destination_root:
        raise SourceOrDestinationUnset()

    if not Path(source_root).is_dir():
        raise SourceNotFound(source_root)

    staging = staging_root(destination_root)
    try:
        staging.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileCopyError(str(staging), e) from e

    copied = copy_tree(source_root, str(staging), progress_cb=progress_cb)
    return CopySummary(copied=copied, staging_root=str(staging))


def run_package(
    destination_root: str,
    cap_bytes: int,
    progress_cb: Optional[ProgressCallback] = None,
    start_index: int = 1,
) -> PackageSummary:
    """
    Phase 2: package <destination_root>/staging into backup_<N>.zip files,
    append to backup.log, then remove the staging folder.

    Raises SourceOrDestinationUnset or MissingStagingDirectory (nothing is
    archived in that case). Per-file failures are reported in the summary.
    """
    destination_root = (destination_root or "").strip()
    if not destination_root:
        raise SourceOrDestinationUnset("Select the destination folder.")

    staging = staging_root(destination_root)

    with BackupLog(destination_root) as log:
        if not is_packaging_ready(destination_root):
            logger.warning("Packaging requested without staged files: %s", staging)
            raise MissingStagingDirectory(str(staging))

        summary = package_tree(
            str(staging),
            destination_root,
            cap_bytes,
            log,
            start_index=start_index,
            progress_cb=progress_cb,
        )

    cleanup(str(staging))
    return summary
