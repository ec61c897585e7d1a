from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class FileEntry:
    path: str           # real file on disk
    relpath: str        # in-archive name, "/" separated, starts with the staging folder name


@dataclass(frozen=True)
class EntryFailure:
    relpath: str
    message: str


@dataclass(frozen=True)
class ArchiveInfo:
    index: int
    name: str           # e.g. backup_1.zip
    path: str
    entries: List[str] = field(default_factory=list)
    declared_bytes: int = 0  # sum of source sizes, not compressed size


@dataclass(frozen=True)
class CopySummary:
    copied: int
    staging_root: str


@dataclass(frozen=True)
class PackageSummary:
    total: int
    archived: int
    archives: List[ArchiveInfo]
    failures: List[EntryFailure]
    log_path: str

    @property
    def failed(self) -> int:
        return len(self.failures)
