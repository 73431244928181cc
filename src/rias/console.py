from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO


class Console:
    """Serialized stdout reporting shared by the worker threads of a run."""

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None) -> None:
        self.verbose = verbose
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()
        self._live = False

    def _write(self, text: str) -> None:
        with self._lock:
            if self._live:
                # keep the live progress line from swallowing the message
                self.stream.write("\n")
                self._live = False
            self.stream.write(text + "\n")
            self.stream.flush()

    def info(self, msg: str) -> None:
        self._write(msg)

    def detail(self, msg: str) -> None:
        if self.verbose:
            self._write(msg)

    def warn(self, msg: str) -> None:
        self._write(f"Warning: {msg}")

    def progress(self, label: str, done: int, total: int) -> None:
        count = str(done).rjust(len(str(total)))
        with self._lock:
            self.stream.write(f"\r{label} {count}/{total} covers")
            self.stream.flush()
            self._live = True

    def finish(self, msg: str) -> None:
        with self._lock:
            prefix = "\r" if self._live else ""
            self.stream.write(f"{prefix}{msg}    \n")
            self.stream.flush()
            self._live = False
