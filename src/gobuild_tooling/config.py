"""Build configuration: defaults, named profiles, gobuild.yaml, and CLI overrides.

Config YAML format (gobuild.yaml in the project root, or --config):
- profile: cmd | bin (default: cmd)
- os: darwin | linux | windows | all | host
- arch: GOARCH value or host; null leaves GOARCH unset
- package: go package selector (e.g. ./cmd/...)
- cgo: true | false; null leaves CGO_ENABLED unset
- pack, compress: booleans
- compresslevel: gzip level 0-9
- build_dir: build output directory (relative to project root)
- env: map of os -> { VAR: value } added to that os's go build environment

Layering is defaults < profile < YAML < CLI overrides. The result is an
immutable BuildConfig passed to the builder and packer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from gobuild_tooling.build.platforms import expand_target_os, host_arch, host_os
from gobuild_tooling.helpers import GobuildError

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "gobuild.yaml"

HOST = "host"

DEFAULT_PROFILE = "cmd"

# All paths relative to project_root (bin/pack relative to build_dir).
DEFAULT_LAYOUT: dict[str, str] = {
    "build_dir": "build",
    "bin_subdir": "bin",
    "pack_subdir": "pack",
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "os": HOST,
    "arch": None,
    "package": "./cmd/...",
    "cgo": None,
    "pack": False,
    "compress": True,
    "compresslevel": 6,
    "build_dir": DEFAULT_LAYOUT["build_dir"],
    "env": {},
}

# cmd: arch/cgo-aware gzip release. bin: plain GOOS build of ./bin/..., tar without gzip.
PROFILES: dict[str, dict[str, Any]] = {
    "cmd": {
        "package": "./cmd/...",
        "arch": HOST,
        "cgo": True,
        "compress": True,
    },
    "bin": {
        "package": "./bin/...",
        "arch": None,
        "cgo": None,
        "compress": False,
    },
}

SETTING_KEYS = frozenset(DEFAULT_SETTINGS) | {"profile"}


class ConfigError(GobuildError):
    """Invalid configuration file, profile, or setting."""


@dataclass(frozen=True)
class BuildConfig:
    """Resolved settings for one gobuild invocation."""

    project_root: Path
    build_dir: Path
    bin_dir: Path
    pack_dir: Path
    target_os: str
    package: str
    arch: str | None = None
    cgo: bool | None = None
    pack: bool = False
    compress: bool = True
    compresslevel: int = 6
    env: dict[str, dict[str, str]] = field(default_factory=dict)

    def target_oses(self) -> list[str]:
        return expand_target_os(self.target_os)

    def extra_env(self, goos: str) -> dict[str, str]:
        return dict(self.env.get(goos, {}))

    def archive_path(self) -> Path:
        """pack_dir/release_{os}.tar.gz, or .tar when compression is off."""
        suffix = ".tar.gz" if self.compress else ".tar"
        return self.pack_dir / f"release_{self.target_os}{suffix}"


def read_config_file(path: Path) -> dict[str, Any]:
    """Load a gobuild YAML file. Empty file -> {}. Raises ConfigError on bad YAML or non-mapping."""
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except OSError as e:
        msg = f"Cannot read config {path}: {e}"
        raise ConfigError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise ConfigError(msg) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config {path} must be a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    out: dict[str, Any] = {}
    for key, value in data.items():
        if key not in SETTING_KEYS:
            log.debug("Ignoring unknown config key %r in %s", key, path)
            continue
        out[key] = value
    return out


def _normalize_env(raw: Any) -> dict[str, dict[str, str]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = "env must be a mapping of os -> {VAR: value}"
        raise ConfigError(msg)
    out: dict[str, dict[str, str]] = {}
    for goos, variables in raw.items():
        if not isinstance(variables, dict):
            msg = f"env.{goos} must be a mapping of VAR: value"
            raise ConfigError(msg)
        out[str(goos)] = {str(k): str(v) for k, v in variables.items()}
    return out


def _require_bool(key: str, value: Any) -> bool:
    """YAML true/false only; quoted strings like "false" are rejected rather than read as true."""
    if not isinstance(value, bool):
        msg = f"{key} must be true or false, got {value!r}"
        raise ConfigError(msg)
    return value


def resolve_settings(
    file_settings: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge defaults < profile < file < overrides. None-valued overrides are skipped."""
    file_settings = file_settings or {}
    flags = {k: v for k, v in (overrides or {}).items() if v is not None}
    profile = flags.get("profile") or file_settings.get("profile") or DEFAULT_PROFILE
    if profile not in PROFILES:
        msg = f"Unknown profile: {profile}. Use {', '.join(sorted(PROFILES))}."
        raise ConfigError(msg)
    settings = dict(DEFAULT_SETTINGS)
    settings.update(PROFILES[profile])
    settings.update(file_settings)
    settings.update(flags)
    settings["profile"] = profile
    return settings


def build_config(project_root: Path, settings: dict[str, Any]) -> BuildConfig:
    """Validate merged settings and freeze them into a BuildConfig."""
    root = project_root.resolve()
    target_os = str(settings["os"])
    if target_os == HOST:
        target_os = host_os()
    try:
        expand_target_os(target_os)
    except GobuildError as e:
        raise ConfigError(str(e)) from e

    arch = settings.get("arch")
    if arch == HOST:
        arch = host_arch()

    level = settings.get("compresslevel", 6)
    if not isinstance(level, int) or isinstance(level, bool) or not 0 <= level <= 9:
        msg = f"compresslevel must be an integer 0-9, got {level!r}"
        raise ConfigError(msg)

    build_dir = Path(str(settings["build_dir"]))
    if not build_dir.is_absolute():
        build_dir = root / build_dir

    cgo = settings.get("cgo")
    if cgo is not None:
        cgo = _require_bool("cgo", cgo)
    pack = _require_bool("pack", settings.get("pack", False))
    compress = _require_bool("compress", settings.get("compress", True))
    return BuildConfig(
        project_root=root,
        build_dir=build_dir,
        bin_dir=build_dir / DEFAULT_LAYOUT["bin_subdir"],
        pack_dir=build_dir / DEFAULT_LAYOUT["pack_subdir"],
        target_os=target_os,
        package=str(settings["package"]),
        arch=str(arch) if arch else None,
        cgo=cgo,
        pack=pack,
        compress=compress,
        compresslevel=level,
        env=_normalize_env(settings.get("env")),
    )


def load_config(
    project_root: Path,
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> BuildConfig:
    """Resolve BuildConfig for project_root.

    config_path defaults to project_root/gobuild.yaml when that file exists; an
    explicit config_path must exist.
    """
    if config_path is None:
        candidate = project_root / CONFIG_FILE_NAME
        file_settings = read_config_file(candidate) if candidate.is_file() else {}
    else:
        if not config_path.is_file():
            msg = f"Config file not found: {config_path}"
            raise ConfigError(msg)
        file_settings = read_config_file(config_path)
    settings = resolve_settings(file_settings, overrides)
    log.debug("Resolved settings: %s", settings)
    return build_config(project_root, settings)
