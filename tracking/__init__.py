"""Usage inventory for the club services.

Public functions call :func:`t` with their dotted name. The first call in a
process appends that name to ``functions_in_use.txt`` under the log
directory, so a run leaves behind the list of code paths it exercised.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Set

_FLAG_VALUES = {"1", "true", "yes", "on"}

_LOCK = threading.RLock()
_INVENTORY_PATH = Path(
    os.environ.get("TRACKING_FILE")
    or Path(os.environ.get("LOG_DIRECTORY", "logs")) / "functions_in_use.txt"
)
_ENABLED = os.environ.get("TRACKING_ENABLED", "true").strip().lower() in _FLAG_VALUES
_RECORDED: Set[str] = set()


def _load_inventory() -> None:
    """Seed the cache from an earlier run so names are written once per file."""
    try:
        with _INVENTORY_PATH.open("r", encoding="utf-8") as handle:
            _RECORDED.update(line.strip() for line in handle if line.strip())
    except OSError:
        pass


_load_inventory()


def t(func_name: str) -> None:
    """Record ``func_name`` the first time it runs; never raises."""
    if not _ENABLED or not func_name or func_name in _RECORDED:
        return

    with _LOCK:
        if func_name in _RECORDED:
            return
        try:
            _INVENTORY_PATH.parent.mkdir(parents=True, exist_ok=True)
            with _INVENTORY_PATH.open("a", encoding="utf-8") as handle:
                handle.write(f"{func_name}\n")
        except OSError:
            return
        _RECORDED.add(func_name)


def seen() -> Set[str]:
    """Names recorded so far, including those loaded from the inventory file."""
    with _LOCK:
        return set(_RECORDED)


def inventory_path() -> Path:
    return _INVENTORY_PATH


__all__ = ["t", "seen", "inventory_path"]
