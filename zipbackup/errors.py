from __future__ import annotations

from typing import Optional


class BackupError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class SourceOrDestinationUnset(BackupError):
    def __init__(self, message: str = "Select both the source and the destination folders."):
        super().__init__(code="PATHS_UNSET", message=message)


class SourceNotFound(BackupError):
    def __init__(self, source_root: str):
        super().__init__(code="SOURCE_NOT_FOUND", message=f"Source folder does not exist: {source_root}")
        self.source_root = source_root


class MissingStagingDirectory(BackupError):
    def __init__(self, staging_root: str):
        super().__init__(
            code="STAGING_MISSING",
            message=f"Staging folder is missing or empty: {staging_root}. Copy the files first.",
        )
        self.staging_root = staging_root


class FileCopyError(BackupError):
    """A single file could not be copied; fatal for the copy run."""

    def __init__(self, relpath: str, cause: Optional[OSError] = None):
        reason = _reason(cause)
        super().__init__(code="FILE_IO_ERROR", message=f"Failed copying {relpath}: {reason}")
        self.relpath = relpath
        self.reason = reason


class ArchiveEntryError(BackupError):
    """A single file could not be archived; logged and skipped."""

    def __init__(self, relpath: str, cause: Optional[OSError] = None):
        reason = _reason(cause)
        super().__init__(code="ARCHIVE_ENTRY_ERROR", message=f"Failed archiving {relpath}: {reason}")
        self.relpath = relpath
        self.reason = reason


class ArchiveWriteError(BackupError):
    def __init__(self, archive_path: str, cause: Optional[OSError] = None):
        super().__init__(
            code="ARCHIVE_WRITE_ERROR",
            message=f"Could not write archive {archive_path}: {_reason(cause)}",
        )
        self.archive_path = archive_path


def _reason(cause: Optional[OSError]) -> str:
    if cause is None:
        return "unknown error"
    return cause.strerror or str(cause)
