"""`gobuild build` — cross-compile per target OS, optionally pack build/bin."""

import sys
from pathlib import Path

from gobuild_tooling.config import PROFILES, load_config
from gobuild_tooling.helpers import GobuildError, setup_logging
from gobuild_tooling.release import run_release


def _parser():
    import argparse

    ap = argparse.ArgumentParser(
        prog="gobuild build",
        description="Cross-compile Go packages into build/bin/<os>/ and optionally pack them",
    )
    ap.add_argument(
        "--os",
        dest="os",
        default=None,
        help="darwin, linux, windows, or all (default: host os)",
    )
    ap.add_argument("--arch", default=None, help="GOARCH, e.g. amd64 or arm64 (default: host arch)")
    ap.add_argument(
        "-p",
        "--package",
        default=None,
        help="Package selector (default: ./cmd/..., or ./bin/... with --profile bin)",
    )
    ap.add_argument(
        "--cgo",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Set CGO_ENABLED=1/0 (default: on for the cmd profile)",
    )
    ap.add_argument(
        "--pack",
        action="store_true",
        default=None,
        help="Pack build/bin into build/pack/release_<os>.tar.gz",
    )
    ap.add_argument(
        "--no-compress",
        dest="compress",
        action="store_false",
        default=None,
        help="Write a plain tar instead of tar.gz",
    )
    ap.add_argument("--profile", choices=sorted(PROFILES), default=None, help="Default set")
    ap.add_argument("--config", type=Path, default=None, help="Config YAML (default: gobuild.yaml)")
    ap.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root (default: cwd)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def run_build_argv(argv: list[str] | None = None) -> int:
    """Parse argv, resolve config, and run the release. Returns exit code."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'gobuild build'
    args = _parser().parse_args(argv)
    setup_logging(args.verbose)
    overrides = {
        "os": args.os,
        "arch": args.arch,
        "package": args.package,
        "cgo": args.cgo,
        "pack": args.pack,
        "compress": args.compress,
        "profile": args.profile,
    }
    try:
        config = load_config(args.project_root, args.config, overrides)
    except GobuildError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return run_release(config)
