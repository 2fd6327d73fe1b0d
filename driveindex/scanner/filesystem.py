"""Filesystem traversal utilities for indexing a volume."""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class ScanStartError(Exception):
    """Raised when a scan cannot begin at all."""


class VisitAction(Enum):
    """What the walk should do after an entry has been visited."""

    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"
    ABORT = "abort"


@dataclass
class EntryInfo:
    path: str
    is_dir: bool
    size: int


Visitor = Callable[[EntryInfo], VisitAction]
ErrorHandler = Callable[[str, OSError], None]


def walk_tree(
    root: str | Path,
    visitor: Visitor,
    on_error: ErrorHandler | None = None,
) -> bool:
    """Visit every reachable entry below ``root`` in pre-order, root first.

    Entries that cannot be stat'ed, and directories that cannot be listed,
    are reported to ``on_error`` and skipped without being visited. Only a
    failure on the root itself raises ``ScanStartError``.

    Returns False if the visitor aborted the walk.
    """
    root_path = os.fspath(root)
    try:
        root_entry = _stat_root(root_path)
        children = _list_directory(root_path) if root_entry.is_dir else []
    except OSError as e:
        raise ScanStartError(f"Cannot read root {root_path}: {e}") from e

    action = visitor(root_entry)
    if action is VisitAction.ABORT:
        return False
    if action is VisitAction.SKIP_SUBTREE:
        return True

    stack: list[list[os.DirEntry]] = [children]
    while stack:
        pending = stack[-1]
        if not pending:
            stack.pop()
            continue
        dir_entry = pending.pop()

        try:
            entry = _process_entry(dir_entry)
            grandchildren = _list_directory(dir_entry.path) if entry.is_dir else []
        except OSError as e:
            _report_skip(dir_entry.path, e, on_error)
            continue

        action = visitor(entry)
        if action is VisitAction.ABORT:
            return False
        if entry.is_dir and action is VisitAction.CONTINUE and grandchildren:
            stack.append(grandchildren)

    return True


def _stat_root(path: str) -> EntryInfo:
    stat_result = os.stat(path)
    is_dir = os.path.isdir(path)
    return EntryInfo(path=path, is_dir=is_dir, size=0 if is_dir else stat_result.st_size)


def _list_directory(path: str) -> list[os.DirEntry]:
    """List a directory, sorted so entries pop off the stack alphabetically."""
    with os.scandir(path) as entries:
        return sorted(entries, key=lambda e: e.name, reverse=True)


def _process_entry(entry: os.DirEntry) -> EntryInfo:
    if entry.is_dir(follow_symlinks=False):
        return EntryInfo(path=entry.path, is_dir=True, size=0)

    stat_result = entry.stat(follow_symlinks=False)
    return EntryInfo(path=entry.path, is_dir=False, size=stat_result.st_size)


def _report_skip(path: str, error: OSError, on_error: ErrorHandler | None) -> None:
    if isinstance(error, PermissionError):
        logger.warning("Permission denied, skipping: %s", path)
    elif isinstance(error, FileNotFoundError):
        logger.warning("Entry disappeared during scan: %s", path)
    else:
        logger.error("Error reading %s, skipping: %s", path, error)

    if on_error is not None:
        on_error(path, error)
