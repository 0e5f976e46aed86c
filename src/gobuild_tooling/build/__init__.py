"""Per-OS go build (GOOS/GOARCH/CGO_ENABLED overrides) and host platform detection."""

from .platforms import (
    ALL_TARGETS,
    TARGET_OSES,
    expand_target_os,
    host_arch,
    host_os,
)
from .target_build import (
    build_env,
    build_target,
    go_build_command,
    go_executable,
)

__all__ = [
    "ALL_TARGETS",
    "TARGET_OSES",
    "build_env",
    "build_target",
    "expand_target_os",
    "go_build_command",
    "go_executable",
    "host_arch",
    "host_os",
]
