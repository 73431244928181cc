from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional

from .core import AccessError, FileInfo, RootNotFoundError, ScanOptions


ErrorCallback = Callable[[AccessError], None]


def list_folder(folder: Path) -> tuple[list[Path], list[FileInfo]]:
    """
    List one folder as (subdirectories, files).
    Files come back sorted by name so that tie-breaking during selection is reproducible.
    """
    subdirs: list[Path] = []
    files: list[FileInfo] = []
    try:
        with os.scandir(folder) as it:
            for entry in it:
                if entry.is_dir():
                    subdirs.append(Path(entry.path))
                elif entry.is_file():
                    files.append(FileInfo(Path(entry.path), entry.name, entry.stat().st_mtime_ns))
    except OSError as e:
        raise AccessError(f"Cannot read {folder}: {e.strerror or e}") from e
    files.sort(key=lambda f: f.name)
    return subdirs, files


def _walk(
    folder: Path,
    depth: int,
    options: ScanOptions,
    targets: list[Path],
    on_error: Optional[ErrorCallback],
) -> None:
    if depth > options.max_depth:
        return
    try:
        subdirs, files = list_folder(folder)
    except AccessError as e:
        if on_error is not None:
            on_error(e)
        return

    if not subdirs:
        if files:
            targets.append(folder)
        return

    if options.include_parent_folders and files:
        targets.append(folder)
    for sub in subdirs:
        _walk(sub, depth + 1, options, targets, on_error)


def scan(options: ScanOptions, on_error: Optional[ErrorCallback] = None) -> list[Path]:
    """
    Collect every folder eligible for a cover under options.root.

    A folder qualifies when it holds files and no subfolders, or when it holds
    files and include_parent_folders is set. Folders deeper than max_depth are
    neither collected nor descended into. Unreadable folders are reported to
    on_error and skipped.
    """
    root = options.root
    if not root.is_dir():
        raise RootNotFoundError(f"Folder does not exist: {root}")
    targets: list[Path] = []
    _walk(root, 0, options, targets, on_error)
    return targets
