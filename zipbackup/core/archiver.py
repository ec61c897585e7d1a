from __future__ import annotations

import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional

from zipbackup.config import COMPRESS_LEVEL, COPY_BUFFER_SIZE, SPOOL_MAX_SIZE, archive_name
from zipbackup.core.backup_log import BackupLog
from zipbackup.core.progress import ProgressCallback, ProgressCounter
from zipbackup.core.walker import collect_entries
from zipbackup.errors import ArchiveEntryError, ArchiveWriteError
from zipbackup.models import ArchiveInfo, EntryFailure, FileEntry, PackageSummary

logger = logging.getLogger(__name__)


def _declared_size(path: str) -> int:
    try:
        return int(os.path.getsize(path))
    except OSError:
        # unreadable file; counts as 0 bytes, the write below reports the error
        return 0


def _open_archive(dest_root: Path, index: int) -> zipfile.ZipFile:
    path = dest_root / archive_name(index)
    try:
        return zipfile.ZipFile(
            path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=COMPRESS_LEVEL,
        )
    except OSError as e:
        raise ArchiveWriteError(str(path), e) from e


def _close_archive(zf: zipfile.ZipFile) -> None:
    try:
        zf.close()
    except OSError as e:
        raise ArchiveWriteError(str(zf.filename), e) from e


def _write_entry(zf: zipfile.ZipFile, entry: FileEntry, size: int) -> None:
    """
    Stream one file into the open archive under entry.relpath.

    The source is read completely into a spool (memory, then a temp file
    past SPOOL_MAX_SIZE) before the archive member is opened, so a read
    failure at any point leaves nothing behind in the archive.
    """
    with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE) as spool:
        try:
            with open(entry.path, "rb") as src:
                shutil.copyfileobj(src, spool, COPY_BUFFER_SIZE)
            spool.seek(0)
        except OSError as e:
            raise ArchiveEntryError(entry.relpath, e) from e

        try:
            with zf.open(entry.relpath, "w", force_zip64=size >= zipfile.ZIP64_LIMIT) as dst:
                shutil.copyfileobj(spool, dst, COPY_BUFFER_SIZE)
        except OSError as e:
            # the archive itself is broken past this point
            raise ArchiveWriteError(str(zf.filename), e) from e


def package_tree(
    staging_root: str,
    destination_root: str,
    cap_bytes: int,
    log: BackupLog,
    start_index: int = 1,
    progress_cb: Optional[ProgressCallback] = None,
) -> PackageSummary:
    """
    Write every file of staging_root into backup_<N>.zip archives under
    destination_root, starting at N = start_index.

    A new archive is started only when the current one already holds data
    and the next file's declared (uncompressed) size would push it past
    cap_bytes. A file bigger than the cap therefore lands alone in a fresh
    archive. Per-file read failures are logged and skipped.
    """
    if isinstance(cap_bytes, bool) or not isinstance(cap_bytes, int) or cap_bytes <= 0:
        raise ValueError(f"cap_bytes must be a positive integer, got {cap_bytes!r}")
    if start_index < 1:
        raise ValueError(f"start_index must be >= 1, got {start_index}")

    dest_root = Path(destination_root)
    entries = collect_entries(staging_root)
    progress = ProgressCounter(len(entries), progress_cb)

    archives: List[ArchiveInfo] = []
    failures: List[EntryFailure] = []

    index = start_index
    zf = _open_archive(dest_root, index)
    current_entries: List[str] = []
    current_size = 0

    log.run_header()
    log.archive(archive_name(index))
    logger.info("Packaging %d file(s) from %s (cap=%d bytes)", len(entries), staging_root, cap_bytes)

    def _finish_current() -> None:
        _close_archive(zf)
        archives.append(
            ArchiveInfo(
                index=index,
                name=archive_name(index),
                path=str(zf.filename),
                entries=list(current_entries),
                declared_bytes=current_size,
            )
        )

    try:
        for entry in entries:
            size = _declared_size(entry.path)

            if current_size > 0 and current_size + size > cap_bytes:
                _finish_current()
                index += 1
                zf = _open_archive(dest_root, index)
                current_entries = []
                current_size = 0
                log.archive(archive_name(index))

            try:
                _write_entry(zf, entry, size)
            except ArchiveEntryError as e:
                logger.warning("%s", e)
                log.error(entry.relpath, e.reason)
                failures.append(EntryFailure(relpath=entry.relpath, message=e.reason))
            else:
                current_entries.append(entry.relpath)
                current_size += size
                log.entry(entry.relpath)

            progress.advance()

        _finish_current()
    except BaseException:
        # leave no open handle behind on a fatal error
        if zf.fp is not None:
            zf.close()
        raise

    archived = sum(len(a.entries) for a in archives)
    logger.info(
        "Packaging done: %d archived, %d failed, %d archive(s)",
        archived,
        len(failures),
        len(archives),
    )
    return PackageSummary(
        total=len(entries),
        archived=archived,
        archives=archives,
        failures=failures,
        log_path=str(log.path),
    )
