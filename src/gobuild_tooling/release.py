"""Release run: clean build dir, go build per target OS, optionally pack build/bin."""

from __future__ import annotations

import shutil
import sys

from gobuild_tooling.build.target_build import build_target
from gobuild_tooling.config import BuildConfig
from gobuild_tooling.pack import PackError, pack_tree


def clean_build_dir(config: BuildConfig) -> int:
    """Remove config.build_dir (missing is fine). Refuses the project root or its parents. Returns 0 or 1."""
    build_dir = config.build_dir.resolve()
    if build_dir == config.project_root or build_dir in config.project_root.parents:
        print(f"❌ Refusing to remove {build_dir}: not inside the project", file=sys.stderr)
        return 1
    try:
        shutil.rmtree(build_dir)
    except FileNotFoundError:
        pass
    except OSError as e:
        print(f"❌ Cannot remove {build_dir}: {e}", file=sys.stderr)
        return 1
    return 0


def pack_release(config: BuildConfig) -> int:
    """Pack bin_dir into config.archive_path(). Returns 0 or 1."""
    dst = config.archive_path()
    print(f"📦 Packing {config.bin_dir} -> {dst}")
    try:
        count = pack_tree(
            config.bin_dir,
            dst,
            compress=config.compress,
            compresslevel=config.compresslevel,
        )
    except PackError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    print(f"📦 Packed {count} entries")
    return 0


def run_release(config: BuildConfig) -> int:
    """Clean, build each target OS (stop at first failure), pack when config.pack. Returns 0 or 1."""
    if clean_build_dir(config) != 0:
        return 1
    for goos in config.target_oses():
        print(f"🔨 Building {config.package} for {goos}")
        if build_target(config, goos) != 0:
            return 1
    if config.pack and pack_release(config) != 0:
        return 1
    print("\n✅ Done")
    return 0
