"""Tests for gobuild_tooling.helpers."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest


class TestRelativePosix:
    def test_nested_path(self, tmp_path: Path) -> None:
        from gobuild_tooling.helpers import relative_posix

        assert relative_posix(tmp_path / "linux" / "app", tmp_path) == "linux/app"

    def test_outside_root_raises(self, tmp_path: Path) -> None:
        from gobuild_tooling.helpers import relative_posix

        with pytest.raises(ValueError):
            relative_posix(Path("/elsewhere/app"), tmp_path)


class TestSetupLogging:
    @pytest.mark.parametrize(
        ("verbose", "level"),
        [(True, logging.DEBUG), (False, logging.WARNING)],
    )
    def test_level_follows_verbose(self, verbose: bool, level: int) -> None:
        from gobuild_tooling.helpers import setup_logging

        with patch("gobuild_tooling.helpers.logging.basicConfig") as m_cfg:
            setup_logging(verbose)
        assert m_cfg.call_args[1]["level"] == level
