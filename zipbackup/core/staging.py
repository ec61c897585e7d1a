from __future__ import annotations

import logging
import shutil
from pathlib import Path

from zipbackup.config import STAGING_DIR_NAME

logger = logging.getLogger(__name__)


def staging_root(destination_root: str) -> Path:
    return Path(destination_root) / STAGING_DIR_NAME


def is_packaging_ready(destination_root: str) -> bool:
    """
    True when <destination>/staging exists, is a directory and is not empty.
    Always read from disk; callers must not cache the answer.
    """
    if not destination_root:
        return False

    root = staging_root(destination_root)
    if not root.is_dir():
        return False

    try:
        return any(root.iterdir())
    except OSError:
        return False


def cleanup(staging: str) -> None:
    """
    Best-effort removal of the staging tree (files first, then empty
    directories bottom-up, then the root). Individual failures are ignored.
    """
    path = Path(staging)
    shutil.rmtree(path, ignore_errors=True)
    if path.exists():
        logger.warning("Staging folder could not be fully removed: %s", path)
    else:
        logger.info("Staging folder removed: %s", path)
