"""`gobuild pack` — pack a directory tree into a tar or tar.gz file."""

import sys
from pathlib import Path

from gobuild_tooling.helpers import setup_logging
from gobuild_tooling.pack import DEFAULT_COMPRESSLEVEL, PackError, pack_tree


def run_pack_argv(argv: list[str] | None = None) -> int:
    """Parse argv and pack <source> into <destination>. Returns exit code."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    ap = argparse.ArgumentParser(prog="gobuild pack", description="Pack a directory into a tarball")
    ap.add_argument("source", type=Path, help="Directory to pack (not itself an entry)")
    ap.add_argument("destination", type=Path, help="Archive file to write")
    ap.add_argument(
        "--no-compress",
        dest="compress",
        action="store_false",
        help="Write a plain tar instead of tar.gz",
    )
    ap.add_argument(
        "--compresslevel",
        type=int,
        default=DEFAULT_COMPRESSLEVEL,
        choices=range(10),
        metavar="0-9",
        help=f"gzip level (default: {DEFAULT_COMPRESSLEVEL})",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)
    setup_logging(args.verbose)
    try:
        count = pack_tree(
            args.source,
            args.destination,
            compress=args.compress,
            compresslevel=args.compresslevel,
        )
    except PackError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    print(f"✅ Packed {count} entries into {args.destination}")
    return 0
