"""Pack an output tree into a tar (optionally gzip) archive.

Entries are named by their path relative to the source root (POSIX separators,
no leading './' or '/'); the root itself is never an entry. The tree is walked
depth-first, each directory before its children, siblings in sorted order, so
the same tree always produces the same byte stream.

The archive is written to a temporary file next to the destination and renamed
into place only after the tar, gzip, and file layers have all been closed. On
any failure the temporary file is removed and PackError is raised; the
destination is never left truncated.
"""

from __future__ import annotations

import contextlib
import gzip
import logging
import os
import tarfile
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from gobuild_tooling.helpers import GobuildError, relative_posix

log = logging.getLogger(__name__)

DEFAULT_COMPRESSLEVEL = 6


class PackError(GobuildError):
    """Packing failed (missing source, unreadable entry, or unwritable destination)."""


def iter_tree(root: Path) -> Iterator[Path]:
    """Yield every path strictly under root, depth-first, siblings sorted. Symlinked dirs are not followed."""
    try:
        names = sorted(os.listdir(root))
    except OSError as e:
        log.error("walk error - %s: %s", root, e)
        msg = f"Cannot list {root}: {e}"
        raise PackError(msg) from e
    for name in names:
        path = root / name
        yield path
        if path.is_dir() and not path.is_symlink():
            yield from iter_tree(path)


def _add_entry(tar: tarfile.TarFile, root: Path, path: Path) -> bool:
    """Write header (and payload for regular files). Returns False for skipped special files."""
    arcname = relative_posix(path, root)
    try:
        info = tar.gettarinfo(str(path), arcname=arcname)
    except OSError as e:
        log.error("stat error - %s: %s", path, e)
        msg = f"Cannot stat {path}: {e}"
        raise PackError(msg) from e
    if info is None:
        log.warning("Skipping unsupported file type: %s", path)
        return False
    if info.islnk():
        # Hardlinked files are written in full, like any other regular file.
        info.type = tarfile.REGTYPE
        info.linkname = ""
        info.size = path.lstat().st_size
    info.mtime = int(info.mtime)

    try:
        if info.isreg():
            with path.open("rb") as fr:
                tar.addfile(info, fr)
        else:
            tar.addfile(info)
    except (OSError, tarfile.TarError, ValueError) as e:
        log.error("write error - %s: %s", path, e)
        msg = f"Cannot archive {path}: {e}"
        raise PackError(msg) from e
    log.debug("packed %s (%d bytes)", arcname, info.size)
    return True


def _write_archive(
    raw: BinaryIO,
    source_root: Path,
    compress: bool,
    compresslevel: int,
    skip: frozenset[Path] = frozenset(),
) -> int:
    """Stream all entries into raw. Layers close tar -> gzip; raw is closed by the caller.

    Paths in skip (resolved parent + name, symlinks not followed) are left out, so
    packing into the source tree does not archive itself.
    """
    count = 0
    with contextlib.ExitStack() as stack:
        out: BinaryIO = raw
        if compress:
            # No embedded file name and a fixed mtime keep the gzip header reproducible.
            out = stack.enter_context(
                gzip.GzipFile(
                    filename="",
                    mode="wb",
                    fileobj=raw,
                    compresslevel=compresslevel,
                    mtime=0,
                )
            )
        tar = stack.enter_context(tarfile.open(fileobj=out, mode="w", format=tarfile.PAX_FORMAT))
        for path in iter_tree(source_root):
            if skip and path.parent.resolve() / path.name in skip:
                continue
            if _add_entry(tar, source_root, path):
                count += 1
    return count


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def pack_tree(
    source_root: Path,
    destination: Path,
    compress: bool = True,
    compresslevel: int = DEFAULT_COMPRESSLEVEL,
) -> int:
    """Archive every file and directory under source_root into destination. Returns entry count.

    Creates missing parent directories of destination. Raises PackError on the
    first failure, leaving no destination file behind.
    """
    source_root = Path(source_root)
    destination = Path(destination)
    if not source_root.is_dir():
        msg = f"Source directory not found: {source_root}"
        raise PackError(msg)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
        )
    except OSError as e:
        log.error("create error - %s: %s", destination, e)
        msg = f"Cannot create {destination}: {e}"
        raise PackError(msg) from e

    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as raw:
            count = _write_archive(
                raw,
                source_root,
                compress,
                compresslevel,
                skip=frozenset(
                    {
                        tmp.parent.resolve() / tmp.name,
                        destination.parent.resolve() / destination.name,
                    }
                ),
            )
        tmp.chmod(_default_file_mode())
        os.replace(tmp, destination)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        log.error("write error - %s: %s", destination, e)
        msg = f"Cannot write {destination}: {e}"
        raise PackError(msg) from e
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    log.debug("wrote %s (%d entries)", destination, count)
    return count
