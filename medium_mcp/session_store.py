"""Persisted browser storage state (cookies + local storage) for the logged-in user."""

from __future__ import annotations

import json
import logging
import os
import pathlib

from medium_mcp.config import ensure_private_dir, storage_state_path

logger = logging.getLogger(__name__)


def path() -> pathlib.Path:
    return storage_state_path()


def exists() -> bool:
    return path().is_file()


def write(state: dict) -> pathlib.Path:
    """Write a Playwright ``storage_state`` blob readable only by the owner."""
    target = path()
    ensure_private_dir(target.parent)

    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        json.dump(state, fh)
    # O_CREAT's mode only applies to new files
    target.chmod(0o600)

    logger.info("Login state saved to %s", target)
    return target


def delete() -> bool:
    target = path()
    if not target.exists():
        return False
    target.unlink()
    logger.info("Login state removed from %s", target)
    return True
