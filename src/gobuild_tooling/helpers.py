"""Shared helpers for gobuild_tooling (errors, path naming, env formatting, logging).

Used by config, build, pack, and cli modules.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

# --- Errors ---


class GobuildError(Exception):
    """Base error for gobuild tooling; the CLI reports it and exits 1."""


# --- Path ---


def relative_posix(path: Path, root: Path) -> str:
    """Path of path relative to root, forward slashes, no leading './' or '/'.

    Raises ValueError when path is not under root.
    """
    rel = path.relative_to(root).as_posix()
    while rel.startswith("./"):
        rel = rel[2:]
    return rel.lstrip("/")


def ensure_trailing_sep(path: Path) -> str:
    """String form of a directory path with a trailing separator (go build -o treats it as a dir)."""
    s = str(path)
    return s if s.endswith(("/", "\\")) else s + "/"


# --- Env ---


def format_env(env: Mapping[str, str]) -> list[str]:
    """KEY=VALUE lines in insertion order."""
    return [f"{k}={v}" for k, v in env.items()]


# --- Logging ---


def setup_logging(verbose: bool) -> None:
    """Debug logging to stderr when verbose; otherwise warnings and errors only."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
