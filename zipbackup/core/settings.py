from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from zipbackup.config import DEFAULT_SIZE_CAP_LABEL, SIZE_CAP_OPTIONS, parse_size_cap

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


@dataclass(frozen=True)
class BackupSettings:
    source_root: str = ""
    destination_root: str = ""
    size_cap_label: str = DEFAULT_SIZE_CAP_LABEL

    @property
    def cap_bytes(self) -> int:
        return parse_size_cap(self.size_cap_label)


def default_settings_dir() -> Path:
    return Path.home() / ".zipbackup"


def settings_path(settings_dir: Optional[str] = None) -> Path:
    base = Path(settings_dir) if settings_dir else default_settings_dir()
    return base / SETTINGS_FILE_NAME


def to_json_dict(settings: BackupSettings) -> Dict[str, Any]:
    return asdict(settings)


def from_json_dict(d: Dict[str, Any]) -> BackupSettings:
    label = str(d.get("size_cap_label") or DEFAULT_SIZE_CAP_LABEL).strip()
    try:
        parse_size_cap(label)
    except ValueError:
        label = DEFAULT_SIZE_CAP_LABEL

    return BackupSettings(
        source_root=str(d.get("source_root") or "").strip(),
        destination_root=str(d.get("destination_root") or "").strip(),
        size_cap_label=label,
    )


def load_settings(settings_dir: Optional[str] = None) -> BackupSettings:
    path = settings_path(settings_dir)
    if not path.exists():
        return BackupSettings()
    try:
        d = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable settings file %s (%s)", path, e)
        return BackupSettings()
    if not isinstance(d, dict):
        return BackupSettings()
    return from_json_dict(d)


def save_settings(settings: BackupSettings, settings_dir: Optional[str] = None) -> Path:
    path = settings_path(settings_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(to_json_dict(settings), indent=2), encoding="utf-8")
    return path


def size_cap_labels() -> list[str]:
    return list(SIZE_CAP_OPTIONS)
