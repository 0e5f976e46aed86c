"""Build one target OS: go build -o {bin_dir}/{os}/ with GOOS/GOARCH/CGO_ENABLED overrides.

The override variables replace any inherited values of the same name; the rest
of the caller's environment is passed through. Output streams to the terminal.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from gobuild_tooling.helpers import ensure_trailing_sep, format_env

if TYPE_CHECKING:
    from gobuild_tooling.config import BuildConfig


def go_executable() -> str:
    """$GOROOT/bin/go when GOROOT is set, else go from PATH, else plain 'go'."""
    goroot = os.environ.get("GOROOT")
    if goroot:
        name = "go.exe" if sys.platform.startswith("win") else "go"
        return str(Path(goroot) / "bin" / name)
    return shutil.which("go") or "go"


def env_overrides(config: BuildConfig, goos: str) -> dict[str, str]:
    """Variables set for this target (GOBIN, GOOS, optional GOARCH/CGO_ENABLED, then config env)."""
    envs: dict[str, str] = {
        "GOBIN": str(config.bin_dir.resolve()),
        "GOOS": goos,
    }
    if config.arch:
        envs["GOARCH"] = config.arch
    if config.cgo is not None:
        envs["CGO_ENABLED"] = "1" if config.cgo else "0"
    envs.update(config.extra_env(goos))
    return envs


def build_env(
    config: BuildConfig,
    goos: str,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """base_env (default os.environ) with the target overrides replacing inherited values."""
    env = dict(os.environ if base_env is None else base_env)
    env.update(env_overrides(config, goos))
    return env


def output_dir(config: BuildConfig, goos: str) -> Path:
    return config.bin_dir / goos


def go_build_command(config: BuildConfig, goos: str) -> list[str]:
    return [
        go_executable(),
        "build",
        "-o",
        ensure_trailing_sep(output_dir(config, goos)),
        "-v",
        config.package,
    ]


def build_target(
    config: BuildConfig,
    goos: str,
    base_env: Mapping[str, str] | None = None,
) -> int:
    """Run go build for goos into bin_dir/goos. Returns 0 or 1."""
    out = output_dir(config, goos)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"❌ Cannot create {out}: {e}", file=sys.stderr)
        return 1

    for line in format_env(env_overrides(config, goos)):
        print(f">>> {line}")
    cmd = go_build_command(config, goos)
    print(">>>", " ".join(cmd))

    try:
        r = subprocess.run(
            cmd,
            cwd=str(config.project_root),
            env=build_env(config, goos, base_env),
        )
    except OSError as e:
        print(f"❌ Cannot run {cmd[0]}: {e}", file=sys.stderr)
        return 1
    if r.returncode != 0:
        print(f"❌ go build failed for {goos} (exit {r.returncode})", file=sys.stderr)
        return 1
    return 0
