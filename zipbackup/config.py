from __future__ import annotations

from typing import Dict, Union

APP_NAME = "Staged ZIP Backup"
APP_VERSION = "1.0.0"

STAGING_DIR_NAME = "staging"
LOG_FILE_NAME = "backup.log"
ARCHIVE_NAME_FMT = "backup_{index}.zip"

# Labels shown in the size picker; MB here means MiB (1024 * 1024 bytes)
_MB = 1024 * 1024
SIZE_CAP_OPTIONS: Dict[str, int] = {
    "100 MB": 100 * _MB,
    "200 MB": 200 * _MB,
    "500 MB": 500 * _MB,
}
DEFAULT_SIZE_CAP_LABEL = "100 MB"

COPY_BUFFER_SIZE = 64 * 1024
COMPRESS_LEVEL = 9
# entries up to this size are buffered in memory before archiving
SPOOL_MAX_SIZE = 16 * 1024 * 1024


def archive_name(index: int) -> str:
    return ARCHIVE_NAME_FMT.format(index=index)


def parse_size_cap(value: Union[str, int]) -> int:
    """
    Turn a size-cap setting into bytes.

    Accepts one of SIZE_CAP_OPTIONS labels, any "<n> MB" string,
    or a positive byte count (int or digit string).
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid size cap: {value!r}")

    if isinstance(value, int):
        cap = value
    else:
        text = str(value).strip()
        if text in SIZE_CAP_OPTIONS:
            return SIZE_CAP_OPTIONS[text]

        parts = text.split()
        try:
            if len(parts) == 2 and parts[1].upper() == "MB":
                cap = int(parts[0]) * _MB
            else:
                cap = int(text)
        except ValueError:
            raise ValueError(f"Invalid size cap: {value!r}") from None

    if cap <= 0:
        raise ValueError(f"Size cap must be positive, got {cap}")
    return cap
