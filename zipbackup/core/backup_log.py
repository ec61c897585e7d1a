from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from zipbackup.config import LOG_FILE_NAME

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"


def log_path(destination_root: str) -> Path:
    return Path(destination_root) / LOG_FILE_NAME


class BackupLog:
    """
    Append-only audit log (<destination>/backup.log).

    Every line is flushed as soon as it is written. Use as a context manager
    so the handle is closed on every exit path.
    """

    def __init__(self, destination_root: str):
        self.path = log_path(destination_root)
        self._fh = None

    def __enter__(self) -> "BackupLog":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("a", encoding="utf-8", newline="\n")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    @property
    def closed(self) -> bool:
        return self._fh is None

    def _write(self, line: str) -> None:
        if self._fh is None:
            raise ValueError(f"Log is not open: {self.path}")
        self._fh.write(line + "\n")
        self._fh.flush()

    def run_header(self, when: Optional[datetime] = None) -> None:
        stamp = (when or datetime.now()).strftime(TIMESTAMP_FMT)
        self._write(f"Backup realizado em: {stamp}")

    def archive(self, name: str) -> None:
        self._write(f"Arquivo ZIP: {name}")

    def entry(self, relpath: str) -> None:
        self._write(f" - {relpath}")

    def error(self, relpath: str, message: str) -> None:
        self._write(f"Erro ao compactar {relpath}: {message}")


def read_log(destination_root: str) -> List[str]:
    path = log_path(destination_root)
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()
