from __future__ import annotations

import random
from typing import Sequence

from .core import ApplyPolicy, FileInfo, NoCandidateError, SortPolicy


def candidates(files: Sequence[FileInfo], policy: ApplyPolicy) -> list[FileInfo]:
    return [f for f in files if f.suffix in policy.extensions]


def select_representative(files: Sequence[FileInfo], policy: ApplyPolicy) -> FileInfo:
    """Pick the one file whose image becomes the folder cover."""
    pool = candidates(files, policy)
    if not pool:
        exts = ", ".join(sorted(policy.extensions))
        raise NoCandidateError(f"No file matching {exts}")

    sort = policy.sort
    if sort is SortPolicy.NAME_ASC:
        return sorted(pool, key=lambda f: f.name)[0]
    if sort is SortPolicy.NAME_DESC:
        return sorted(pool, key=lambda f: f.name, reverse=True)[0]
    if sort is SortPolicy.DATE_ASC:
        return sorted(pool, key=lambda f: f.mtime_ns)[0]
    if sort is SortPolicy.DATE_DESC:
        return sorted(pool, key=lambda f: f.mtime_ns, reverse=True)[0]
    if sort is SortPolicy.RANDOM:
        return random.Random().choice(pool)
    raise ValueError(f"Unsupported sort policy: {sort!r}")
