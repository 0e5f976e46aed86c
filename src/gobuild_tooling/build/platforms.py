"""Target OS set and host platform detection (GOOS/GOARCH naming)."""

from __future__ import annotations

import platform
import sys

from gobuild_tooling.helpers import GobuildError

TARGET_OSES: tuple[str, ...] = ("darwin", "linux", "windows")

ALL_TARGETS = "all"

# platform.machine() -> GOARCH
MACHINE_TO_GOARCH: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


def expand_target_os(target_os: str) -> list[str]:
    """OS names to build for target_os: one of TARGET_OSES, or all of them for 'all'."""
    if target_os == ALL_TARGETS:
        return list(TARGET_OSES)
    if target_os in TARGET_OSES:
        return [target_os]
    msg = f"Unknown target os: {target_os}. Use {', '.join(TARGET_OSES)} or {ALL_TARGETS}."
    raise GobuildError(msg)


def host_os() -> str:
    """GOOS of the running interpreter's platform."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def host_arch() -> str:
    """GOARCH of the running machine; unknown machine names pass through lower-cased."""
    machine = platform.machine().lower()
    return MACHINE_TO_GOARCH.get(machine, machine)
