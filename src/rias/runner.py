from __future__ import annotations

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from .codec import ImageCodec
from .console import Console
from .core import (
    AccessError,
    ApplyPolicy,
    Outcome,
    RemovePolicy,
    RiasError,
    RunSummary,
    ScanOptions,
)
from .covers import Codec, apply_cover, remove_cover
from .scanner import scan
from .windows import AttributeStore, default_attribute_store, notify_shell


class AtomicCounter:
    """Progress count shared by worker threads; increments never race."""

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def default_workers() -> int:
    return min(32, os.cpu_count() or 4)


def _collect(options: ScanOptions, console: Console) -> list[Path]:
    def skipped(e: AccessError) -> None:
        console.detail(f"Skipping: {e}")

    started = time.perf_counter()
    targets = scan(options, on_error=skipped)
    console.detail(f"Collected {len(targets)} folder in {time.perf_counter() - started:.2f}s")
    return targets


def _refresh(notify: Callable[[], None], console: Console) -> None:
    try:
        notify()
    except Exception as e:
        console.warn(f"Could not refresh icons: {e}")


def run_apply(
    options: ScanOptions,
    policy: ApplyPolicy,
    *,
    workers: Optional[int] = None,
    console: Optional[Console] = None,
    codec: Optional[Codec] = None,
    attributes: Optional[AttributeStore] = None,
    notify: Callable[[], None] = notify_shell,
) -> RunSummary:
    """Scan options.root and apply covers to every target folder in parallel."""
    workers = default_workers() if workers is None else workers
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    console = console or Console()
    codec = codec or ImageCodec()
    attributes = attributes or default_attribute_store()

    targets = _collect(options, console)
    total = len(targets)
    console.info(f"Processing applying covers for {total} folder")

    applied = AtomicCounter()
    skipped = AtomicCounter()
    summary = RunSummary(total=total)

    def task(folder: Path) -> Outcome:
        outcome = apply_cover(folder, policy, codec=codec, attributes=attributes, progress=applied)
        if outcome is Outcome.SKIPPED:
            skipped.increment()
        else:
            console.progress("Applied", applied.value, total)
        return outcome

    started = time.perf_counter()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(task, folder): folder for folder in targets}
        for fut in as_completed(futures):
            folder = futures[fut]
            try:
                outcome = fut.result()
            except RiasError as e:
                summary.failed += 1
                summary.failures.append((folder, str(e)))
                console.detail(f"Failed {folder}: {e}")
                continue
            console.detail(f"{outcome.value.capitalize()} {folder}")

    summary.done = applied.value
    summary.skipped = skipped.value
    console.detail(f"Processed {total} folder in {time.perf_counter() - started:.2f}s")
    count = str(summary.done).rjust(len(str(total)))
    console.finish(f"Processed covers for {count}/{total} folder")
    _refresh(notify, console)
    return summary


def run_remove(
    options: ScanOptions,
    policy: RemovePolicy,
    *,
    console: Optional[Console] = None,
    attributes: Optional[AttributeStore] = None,
    notify: Callable[[], None] = notify_shell,
) -> RunSummary:
    """Scan options.root and remove covers one folder at a time."""
    console = console or Console()
    attributes = attributes or default_attribute_store()

    targets = _collect(options, console)
    total = len(targets)
    console.info(f"Processing removing covers for {total} folder")

    visited = AtomicCounter()
    summary = RunSummary(total=total)

    started = time.perf_counter()
    for folder in targets:
        try:
            outcome = remove_cover(folder, policy, attributes=attributes, progress=visited)
        except RiasError as e:
            summary.failed += 1
            summary.failures.append((folder, str(e)))
            console.detail(f"Failed {folder}: {e}")
        else:
            if outcome is Outcome.NOT_COVERED:
                summary.skipped += 1
            console.detail(f"{outcome.value.capitalize()} {folder}")
        console.progress("Removed", visited.value, total)

    summary.done = visited.value
    console.detail(f"Processed {total} folder in {time.perf_counter() - started:.2f}s")
    count = str(summary.done).rjust(len(str(total)))
    console.finish(f"Removed covers for {count}/{total} folder")
    _refresh(notify, console)
    return summary
