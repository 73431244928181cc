from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .console import Console
from .core import (
    DEFAULT_COVER_NAME,
    MAX_ICON_SIZE,
    ApplyPolicy,
    RemovePolicy,
    RootNotFoundError,
    ScanOptions,
    SortPolicy,
    __version__,
)
from .runner import run_apply, run_remove


def parse_resolutions(raw: str) -> tuple[int, ...]:
    """'256, 48, 32' -> (256, 48, 32)"""
    sizes = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            size = int(part)
        except ValueError:
            raise argparse.ArgumentTypeError(f"not a number: {part!r}")
        if not 1 <= size <= MAX_ICON_SIZE:
            raise argparse.ArgumentTypeError(f"icon sizes must be between 1 and {MAX_ICON_SIZE}: {size}")
        sizes.append(size)
    if not sizes:
        raise argparse.ArgumentTypeError("at least one icon size is required")
    return tuple(sizes)


def parse_extensions(raw: str) -> frozenset[str]:
    """'.jpg, .png' -> {'.jpg', '.png'}; matching stays case-sensitive."""
    exts = frozenset(part.strip() for part in raw.split(",") if part.strip())
    if not exts:
        raise argparse.ArgumentTypeError("at least one extension is required")
    return exts


def _depth(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}")
    if value < 0:
        raise argparse.ArgumentTypeError("depth must be >= 0")
    return value


def _jobs(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}")
    if value < 1:
        raise argparse.ArgumentTypeError("jobs must be >= 1")
    return value


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-f", "--folder", default=".", help="Where to start applying cover to folders. Default: .")
    p.add_argument("-d", "--depth", type=_depth, default=1, help="Maximum search depth for nested folders. Default: 1")
    p.add_argument("-o", "--overwrite", action="store_true", help="Regenerate cover for folder with existing covers.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output.")
    p.add_argument("--folder-with-subfolders", dest="include_parent", action="store_true", help=argparse.SUPPRESS)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rias", description="Use a picture inside each folder as its Windows folder icon.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    ap = sub.add_parser("apply", help="Create covers for folders containing pictures.")
    _add_common(ap)
    ap.add_argument(
        "-s",
        "--sort",
        type=SortPolicy,
        choices=list(SortPolicy),
        default=SortPolicy.NAME_ASC,
        metavar="{" + ",".join(s.value for s in SortPolicy) + "}",
        help="Which picture becomes the cover. Default: nameAsc",
    )
    ap.add_argument("-j", "--jobs", type=_jobs, default=None, help="Number of folders processed in parallel.")
    ap.add_argument("--ico", default=DEFAULT_COVER_NAME, help=argparse.SUPPRESS)
    ap.add_argument("--cover-visible", action="store_true", help=argparse.SUPPRESS)
    ap.add_argument("--ini-visible", action="store_true", help=argparse.SUPPRESS)
    ap.add_argument("--ico-resolutions", type=parse_resolutions, default="256, 48, 32, 24, 16", help=argparse.SUPPRESS)
    ap.add_argument(
        "--cover-source-filter", type=parse_extensions, default=".jpg, .jpeg, .png, .webp", help=argparse.SUPPRESS
    )

    rp = sub.add_parser("remove", help="Remove covers of folders.")
    _add_common(rp)
    rp.add_argument("--ico", default=DEFAULT_COVER_NAME, help="Remove the cover file with this name. Default: icon.ico")
    rp.add_argument("--everything", action="store_true", help=argparse.SUPPRESS)
    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console(verbose=args.verbose)
    options = ScanOptions(root=Path(args.folder), max_depth=args.depth, include_parent_folders=args.include_parent)

    try:
        if args.command == "apply":
            try:
                policy = ApplyPolicy(
                    overwrite=args.overwrite,
                    sort=args.sort,
                    extensions=args.cover_source_filter,
                    resolutions=args.ico_resolutions,
                    cover_visible=args.cover_visible,
                    descriptor_visible=args.ini_visible,
                    cover_name=args.ico,
                )
            except ValueError as e:
                parser.error(str(e))
            run_apply(options, policy, workers=args.jobs, console=console)
        else:
            run_remove(options, RemovePolicy(cover_name=args.ico, remove_all=args.everything), console=console)
    except RootNotFoundError as e:
        print(f"Error: {e}")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
