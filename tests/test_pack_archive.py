"""Tests for gobuild_tooling.pack.archive."""

import gzip
import os
import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest


def _extract(archive: Path, dest: Path) -> None:
    with tarfile.open(archive) as tar:
        if hasattr(tarfile, "data_filter"):
            tar.extractall(dest, filter="data")
        else:
            tar.extractall(dest)


def _snapshot(root: Path) -> dict[str, bytes | None]:
    """relative path -> bytes for files, None for directories."""
    out: dict[str, bytes | None] = {}
    for p in sorted(root.rglob("*")):
        rel = p.relative_to(root).as_posix()
        out[rel] = p.read_bytes() if p.is_file() else None
    return out


class TestPackTree:
    def test_two_platform_release_tar_gz(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        dst = tmp_path / "release.tar.gz"
        count = pack_tree(output_tree, dst)

        assert count == 4
        with gzip.open(dst) as gz:
            assert gz.read(1)
        with tarfile.open(dst, "r:gz") as tar:
            files = [m for m in tar.getmembers() if m.isfile()]
            assert [m.name for m in files] == ["linux/app", "windows/app.exe"]
            assert [m.size for m in files] == [10, 5]
            assert tar.extractfile("linux/app").read() == b"0123456789"
            assert tar.extractfile("windows/app.exe").read() == b"ABCDE"

    def test_entries_are_relative_and_exclude_root(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        dst = tmp_path / "release.tar.gz"
        pack_tree(output_tree, dst)
        with tarfile.open(dst) as tar:
            names = tar.getnames()
        assert names == ["linux", "linux/app", "windows", "windows/app.exe"]
        for name in names:
            assert name not in ("", ".", "./")
            assert not name.startswith(("/", "./"))
            assert "\\" not in name

    def test_round_trip_reproduces_tree(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        src = tmp_path / "src"
        (src / "linux" / "amd64").mkdir(parents=True)
        (src / "darwin").mkdir()
        (src / "empty").mkdir()
        (src / "linux" / "amd64" / "server").write_bytes(b"\x7fELF" + bytes(range(256)))
        (src / "linux" / "README").write_text("hello\n")
        (src / "darwin" / "server").write_bytes(b"")
        (src / "top.txt").write_bytes(b"top")

        dst = tmp_path / "pack" / "release.tar.gz"
        pack_tree(src, dst)
        restored = tmp_path / "restored"
        restored.mkdir()
        _extract(dst, restored)

        assert _snapshot(restored) == _snapshot(src)

    def test_empty_directories_only(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        src = tmp_path / "src"
        (src / "a").mkdir(parents=True)
        (src / "b" / "c").mkdir(parents=True)

        dst = tmp_path / "release.tar"
        count = pack_tree(src, dst, compress=False)

        assert count == 3
        with tarfile.open(dst) as tar:
            members = tar.getmembers()
        assert [m.name for m in members] == ["a", "b", "b/c"]
        assert all(m.isdir() for m in members)
        assert all(m.size == 0 for m in members)

    def test_gzip_magic_when_compressed(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        dst = tmp_path / "release.tar.gz"
        pack_tree(output_tree, dst, compress=True)
        assert dst.read_bytes()[:2] == b"\x1f\x8b"

    def test_ustar_magic_when_uncompressed(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        dst = tmp_path / "release.tar"
        pack_tree(output_tree, dst, compress=False)
        data = dst.read_bytes()
        assert data[257:262] == b"ustar"
        assert len(data) % 512 == 0

    def test_missing_source_raises_and_writes_nothing(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import PackError, pack_tree

        dst = tmp_path / "pack" / "release.tar.gz"
        with pytest.raises(PackError, match="not found"):
            pack_tree(tmp_path / "missing", dst)
        assert not dst.exists()

    def test_read_failure_leaves_no_partial_file(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import PackError, pack_tree

        pack_dir = tmp_path / "pack"
        dst = pack_dir / "release.tar.gz"
        with (
            patch.object(Path, "open", side_effect=PermissionError("denied")),
            pytest.raises(PackError, match="Cannot archive"),
        ):
            pack_tree(output_tree, dst)
        assert not dst.exists()
        assert list(pack_dir.iterdir()) == []

    def test_failure_keeps_previous_destination(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import PackError, pack_tree

        dst = tmp_path / "release.tar.gz"
        dst.write_bytes(b"previous")
        with (
            patch.object(Path, "open", side_effect=PermissionError("denied")),
            pytest.raises(PackError),
        ):
            pack_tree(output_tree, dst)
        assert dst.read_bytes() == b"previous"

    def test_creates_missing_parent_directories(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        dst = tmp_path / "a" / "b" / "c" / "release.tar.gz"
        pack_tree(output_tree, dst)
        assert dst.is_file()

    def test_output_is_reproducible(self, output_tree: Path, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        first = tmp_path / "one.tar.gz"
        second = tmp_path / "two.tar.gz"
        pack_tree(output_tree, first)
        pack_tree(output_tree, second)
        assert first.read_bytes() == second.read_bytes()

    def test_destination_inside_source_is_not_packed(self, output_tree: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        dst = output_tree / "release.tar.gz"
        pack_tree(output_tree, dst)
        with tarfile.open(dst) as tar:
            names = tar.getnames()
        assert names == ["linux", "linux/app", "windows", "windows/app.exe"]


class TestIterTree:
    def test_depth_first_sorted_with_files_and_dirs_interleaved(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import iter_tree

        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "x").write_text("x")
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "c.txt").write_text("c")

        rel = [p.relative_to(tmp_path).as_posix() for p in iter_tree(tmp_path)]
        assert rel == ["a.txt", "b", "b/x", "c.txt"]

    def test_unlistable_root_raises_pack_error(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import PackError, iter_tree

        with pytest.raises(PackError):
            list(iter_tree(tmp_path / "missing"))


class TestEntryMetadata:
    def test_hardlinked_files_are_written_in_full(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        src = tmp_path / "src"
        src.mkdir()
        (src / "a").write_bytes(b"01234")
        try:
            os.link(src / "a", src / "b")
        except OSError:
            pytest.skip("hard links not supported here")

        dst = tmp_path / "release.tar.gz"
        pack_tree(src, dst)
        with tarfile.open(dst) as tar:
            members = tar.getmembers()
            assert [m.name for m in members] == ["a", "b"]
            for m in members:
                assert m.isfile()
                assert m.size == 5
                assert m.linkname == ""
                assert tar.extractfile(m).read() == b"01234"

    def test_exec_bit_and_whole_second_mtime_survive(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        src = tmp_path / "src"
        (src / "linux").mkdir(parents=True)
        app = src / "linux" / "app"
        app.write_bytes(b"\x7fELF")
        app.chmod(0o755)
        os.utime(app, (1700000000.75, 1700000000.75))

        dst = tmp_path / "release.tar.gz"
        pack_tree(src, dst)
        with tarfile.open(dst) as tar:
            info = tar.getmember("linux/app")
        assert info.mode & 0o777 == 0o755
        assert info.mtime == 1700000000
        assert isinstance(info.mtime, int)

    def test_symlink_to_destination_is_kept(self, tmp_path: Path) -> None:
        from gobuild_tooling.pack import pack_tree

        src = tmp_path / "src"
        src.mkdir()
        (src / "a").write_text("a")
        dst = tmp_path / "release.tar.gz"
        try:
            (src / "latest").symlink_to(dst)
        except OSError:
            pytest.skip("symlinks not supported here")

        pack_tree(src, dst)
        with tarfile.open(dst) as tar:
            latest = tar.getmember("latest")
            names = tar.getnames()
        assert names == ["a", "latest"]
        assert latest.issym()
        assert latest.linkname == str(dst)
