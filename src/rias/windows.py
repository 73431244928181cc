from __future__ import annotations

import ctypes
import os
from pathlib import Path


FILE_ATTRIBUTE_READONLY = 0x1
FILE_ATTRIBUTE_HIDDEN = 0x2
FILE_ATTRIBUTE_SYSTEM = 0x4
INVALID_FILE_ATTRIBUTES = 0xFFFFFFFF

# Everything that stops Explorer-owned files from being replaced or deleted.
BLOCKING_ATTRIBUTES = FILE_ATTRIBUTE_READONLY | FILE_ATTRIBUTE_HIDDEN | FILE_ATTRIBUTE_SYSTEM

SHCNE_ASSOCCHANGED = 0x08000000
SHCNF_IDLIST = 0x0000


def is_windows() -> bool:
    return os.name == "nt"


class AttributeStore:
    """File attribute access. The base store is a no-op for hosts without DOS attributes."""

    def get(self, path: Path) -> int:
        return 0

    def add(self, path: Path, flags: int) -> None:
        pass

    def clear(self, path: Path, flags: int) -> None:
        pass


class WindowsAttributeStore(AttributeStore):
    def __init__(self) -> None:
        from ctypes import wintypes

        k32 = ctypes.windll.kernel32
        self._get = k32.GetFileAttributesW
        self._get.argtypes = [wintypes.LPCWSTR]
        self._get.restype = wintypes.DWORD
        self._set = k32.SetFileAttributesW
        self._set.argtypes = [wintypes.LPCWSTR, wintypes.DWORD]
        self._set.restype = wintypes.BOOL

    def get(self, path: Path) -> int:
        attrs = self._get(str(path))
        if attrs == INVALID_FILE_ATTRIBUTES:
            raise ctypes.WinError()
        return int(attrs)

    def _put(self, path: Path, attrs: int) -> None:
        if not self._set(str(path), attrs):
            raise ctypes.WinError()

    def add(self, path: Path, flags: int) -> None:
        current = self.get(path)
        if current & flags != flags:
            self._put(path, current | flags)

    def clear(self, path: Path, flags: int) -> None:
        current = self.get(path)
        if current & flags:
            self._put(path, current & ~flags)


def default_attribute_store() -> AttributeStore:
    if is_windows():
        return WindowsAttributeStore()
    return AttributeStore()


def notify_shell() -> None:
    """Ask Explorer to drop cached folder icons (Windows-only). Callers report failures."""
    if not is_windows():
        return
    ctypes.windll.shell32.SHChangeNotify(SHCNE_ASSOCCHANGED, SHCNF_IDLIST, None, None)
