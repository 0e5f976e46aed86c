"""Archive packer: serialize an output tree into a tar or tar.gz file."""

from .archive import (
    DEFAULT_COMPRESSLEVEL,
    PackError,
    iter_tree,
    pack_tree,
)

__all__ = [
    "DEFAULT_COMPRESSLEVEL",
    "PackError",
    "iter_tree",
    "pack_tree",
]
