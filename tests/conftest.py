"""Pytest fixtures for gobuild tooling tests."""

from pathlib import Path

import pytest


@pytest.fixture
def output_tree(tmp_path: Path) -> Path:
    """out/linux/app (10 bytes) and out/windows/app.exe (5 bytes). Returns out/."""
    out = tmp_path / "out"
    (out / "linux").mkdir(parents=True)
    (out / "windows").mkdir()
    (out / "linux" / "app").write_bytes(b"0123456789")
    (out / "windows" / "app.exe").write_bytes(b"ABCDE")
    return out


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for BuildConfig rooted at tmp_path; keyword args override fields."""
    from gobuild_tooling.config import BuildConfig

    def _make(**kwargs):
        build_dir = kwargs.pop("build_dir", tmp_path / "build")
        fields = {
            "project_root": tmp_path.resolve(),
            "build_dir": build_dir,
            "bin_dir": build_dir / "bin",
            "pack_dir": build_dir / "pack",
            "target_os": "linux",
            "package": "./cmd/...",
        }
        fields.update(kwargs)
        return BuildConfig(**fields)

    return _make
