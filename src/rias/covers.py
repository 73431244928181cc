from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Sequence

from .core import (
    DESCRIPTOR_NAME,
    ApplyPolicy,
    CoverIOError,
    Outcome,
    RemovePolicy,
    __version__,
)
from .scanner import list_folder
from .selector import select_representative
from .windows import (
    BLOCKING_ATTRIBUTES,
    FILE_ATTRIBUTE_HIDDEN,
    FILE_ATTRIBUTE_READONLY,
    FILE_ATTRIBUTE_SYSTEM,
    AttributeStore,
    default_attribute_store,
)


class Codec(Protocol):
    def render(self, source: Path, resolutions: Sequence[int]) -> bytes: ...


class Counter(Protocol):
    def increment(self) -> int: ...


def descriptor_text(cover_name: str) -> str:
    lines = [
        "[.ShellClassInfo]",
        f"IconResource=.\\{cover_name},0",
        f"IconFile=.\\{cover_name}",
        "IconIndex=0",
        f";rias {__version__}",
    ]
    return "".join(line + "\r\n" for line in lines)


def descriptor_bytes(cover_name: str) -> bytes:
    """Encode desktop.ini; Explorer only reads non-ANSI names from a UTF-16 file with BOM."""
    text = descriptor_text(cover_name)
    if text.isascii():
        return text.encode("ascii")
    return b"\xff\xfe" + text.encode("utf-16-le")


def atomic_write(dest: Path, data: bytes) -> None:
    """Write data next to dest, then rename it over dest so readers never see a partial file."""
    fd, tmp = tempfile.mkstemp(prefix=".rias-", suffix=".tmp", dir=dest.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, dest)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def _replace_file(path: Path, data: bytes, flags: int, attributes: AttributeStore) -> None:
    previous = None
    if path.exists():
        previous = attributes.get(path) & BLOCKING_ATTRIBUTES
        attributes.clear(path, BLOCKING_ATTRIBUTES)
    try:
        atomic_write(path, data)
    except BaseException:
        # the old file is still in place: give it its attributes back
        if previous:
            attributes.add(path, previous)
        raise
    attributes.add(path, flags)


def apply_cover(
    folder: Path,
    policy: ApplyPolicy,
    *,
    codec: Codec,
    attributes: Optional[AttributeStore] = None,
    progress: Optional[Counter] = None,
) -> Outcome:
    """
    Generate the cover icon and desktop.ini for one folder.

    Returns Outcome.SKIPPED when a cover already exists and overwrite is off.
    Raises NoCandidateError, CodecError, AccessError or CoverIOError; the folder
    is left as it was unless the failure happens after the icon was replaced.
    """
    folder = Path(folder)
    attributes = attributes or default_attribute_store()
    _, files = list_folder(folder)

    if not policy.overwrite and any(f.name == policy.cover_name for f in files):
        return Outcome.SKIPPED

    source = select_representative(files, policy)
    icon = codec.render(source.path, policy.resolutions)

    icon_flags = FILE_ATTRIBUTE_SYSTEM
    if not policy.cover_visible:
        icon_flags |= FILE_ATTRIBUTE_HIDDEN
    ini_flags = FILE_ATTRIBUTE_SYSTEM
    if not policy.descriptor_visible:
        ini_flags |= FILE_ATTRIBUTE_HIDDEN

    try:
        _replace_file(folder / policy.cover_name, icon, icon_flags, attributes)
        ini = descriptor_bytes(policy.cover_name)
        _replace_file(folder / DESCRIPTOR_NAME, ini, ini_flags, attributes)
        attributes.add(folder, FILE_ATTRIBUTE_READONLY | FILE_ATTRIBUTE_SYSTEM)
    except OSError as e:
        raise CoverIOError(f"Could not write cover in {folder}: {e}") from e

    if progress is not None:
        progress.increment()
    return Outcome.APPLIED


def _delete(path: Path, attributes: AttributeStore) -> None:
    attributes.clear(path, BLOCKING_ATTRIBUTES)
    path.unlink()


def remove_cover(
    folder: Path,
    policy: RemovePolicy,
    *,
    attributes: Optional[AttributeStore] = None,
    progress: Optional[Counter] = None,
) -> Outcome:
    """
    Delete the cover a previous run left in folder.

    Only folders holding a desktop.ini are touched. The descriptor is not parsed:
    with remove_all set and no file named policy.cover_name, just desktop.ini goes.
    Every visited folder counts toward progress, whatever the outcome.
    """
    folder = Path(folder)
    attributes = attributes or default_attribute_store()
    try:
        _, files = list_folder(folder)
        descriptors = [f.path for f in files if f.name == DESCRIPTOR_NAME]
        if not descriptors:
            return Outcome.NOT_COVERED

        covers = [f.path for f in files if f.name == policy.cover_name]
        if covers:
            doomed = covers + descriptors[:1]
        elif policy.remove_all:
            doomed = descriptors[:1]
        else:
            return Outcome.NOT_COVERED

        try:
            for path in dict.fromkeys(doomed):
                _delete(path, attributes)
        except OSError as e:
            raise CoverIOError(f"Could not remove cover in {folder}: {e}") from e
        return Outcome.REMOVED
    finally:
        if progress is not None:
            progress.increment()
