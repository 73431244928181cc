from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


__version__ = "0.1.0"

DESCRIPTOR_NAME = "desktop.ini"
DEFAULT_COVER_NAME = "icon.ico"
DEFAULT_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})
DEFAULT_RESOLUTIONS = (256, 48, 32, 24, 16)

# Largest entry the ICO container can hold.
MAX_ICON_SIZE = 256


class RiasError(Exception):
    """Base class for errors contained at the folder boundary."""


class AccessError(RiasError):
    """A directory could not be listed."""


class NoCandidateError(RiasError):
    """A folder has no file matching the source extension filter."""


class CodecError(RiasError):
    """The source image could not be decoded or the icon encoded."""


class CoverIOError(RiasError):
    """Writing, renaming, deleting or re-attributing a cover file failed."""


class RootNotFoundError(RiasError):
    """The scan root does not exist or is not a directory."""


class SortPolicy(Enum):
    NAME_ASC = "nameAsc"
    NAME_DESC = "nameDes"
    DATE_ASC = "dateAsc"
    DATE_DESC = "dateDes"
    RANDOM = "random"


class Outcome(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    REMOVED = "removed"
    NOT_COVERED = "not covered"


@dataclass(frozen=True)
class FileInfo:
    path: Path
    name: str
    mtime_ns: int = 0

    @property
    def suffix(self) -> str:
        """Everything from the last dot, so '.png' on its own is a png; 'a.' has none."""
        dot = self.name.rfind(".")
        if dot == -1 or dot == len(self.name) - 1:
            return ""
        return self.name[dot:]


@dataclass(frozen=True)
class ScanOptions:
    root: Path
    max_depth: int = 1
    include_parent_folders: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        object.__setattr__(self, "root", Path(self.root))


@dataclass(frozen=True)
class ApplyPolicy:
    overwrite: bool = False
    sort: SortPolicy = SortPolicy.NAME_ASC
    extensions: frozenset[str] = DEFAULT_EXTENSIONS
    resolutions: tuple[int, ...] = DEFAULT_RESOLUTIONS
    cover_visible: bool = False
    descriptor_visible: bool = False
    cover_name: str = DEFAULT_COVER_NAME

    def __post_init__(self) -> None:
        object.__setattr__(self, "extensions", frozenset(self.extensions))
        object.__setattr__(self, "resolutions", tuple(self.resolutions))
        if not self.extensions or any(not ext for ext in self.extensions):
            raise ValueError("extensions must be a non-empty set of non-empty suffixes")
        if not self.resolutions:
            raise ValueError("at least one icon resolution is required")
        for size in self.resolutions:
            if size < 1 or size > MAX_ICON_SIZE:
                raise ValueError(f"icon resolution must be between 1 and {MAX_ICON_SIZE}, got {size}")
        if not self.cover_name or self.cover_name == DESCRIPTOR_NAME:
            raise ValueError(f"invalid cover file name: {self.cover_name!r}")


@dataclass(frozen=True)
class RemovePolicy:
    cover_name: str = DEFAULT_COVER_NAME
    remove_all: bool = False


@dataclass
class RunSummary:
    total: int = 0
    done: int = 0
    skipped: int = 0
    failed: int = 0
    failures: list[tuple[Path, str]] = field(default_factory=list)
