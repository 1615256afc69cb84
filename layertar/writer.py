import logging
import os
import posixpath
import tarfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .constants import WHITEOUT_PREFIX
from .enums import CompressionKind, EntryKind
from .factory import FileRecordFactory
from .hardlinks import HardlinkTable, check_hardlink
from .schemas import FileRecord

logger = logging.getLogger(__name__)

_WRITE_MODES = {
    CompressionKind.UNCOMPRESSED: "w",
    CompressionKind.GZIP: "w:gz",
    CompressionKind.BZIP2: "w:bz2",
}


def add_to_tar(record: FileRecord, hardlinks: HardlinkTable, tar: tarfile.TarFile):
    """
    Appends one entry for `record` to `tar`.

    Regular files carry their content unless they are a hardlink to a path
    already written during this pass, in which case a zero-size link entry
    pointing at that path is emitted instead. Sockets are skipped.
    """
    if record.kind is EntryKind.SOCKET:
        logger.info(f"ignoring socket {record.source_path}, not adding to tar")
        return

    linkname = ""
    if record.kind is EntryKind.SYMLINK:
        linkname = record.linkname or os.readlink(record.source_path)

    info = record.as_tarinfo(linkname)
    info.name = record.arc_path

    hardlink, original = check_hardlink(record.arc_path, hardlinks, record)
    if hardlink:
        info.type = tarfile.LNKTYPE
        info.linkname = original
        info.size = 0

    if not record.is_regular or hardlink:
        tar.addfile(info)
        return

    with open(record.source_path, "rb") as f:
        tar.addfile(info, f)


def add_path(
    source_path: Union[str, Path],
    arcname: str,
    hardlinks: HardlinkTable,
    tar: tarfile.TarFile,
):
    """Snapshots `source_path` with lstat and adds it under `arcname`."""
    record = FileRecordFactory.create(source_path, arcname)
    add_to_tar(record, hardlinks, tar)


def whiteout_name(path: str) -> str:
    """Returns '<dir>/.wh.<basename>' for a deleted path."""
    path = path.rstrip("/")
    return posixpath.join(
        posixpath.dirname(path), WHITEOUT_PREFIX + posixpath.basename(path)
    )


def whiteout(path: str, tar: tarfile.TarFile):
    """Marks `path` as deleted with an empty whiteout entry."""
    info = tarfile.TarInfo(name=whiteout_name(path))
    info.size = 0
    tar.addfile(info)


class LayerWriter:
    """
    Builds one layer archive.

    Owns the output TarFile and the HardlinkTable for a single pass, so that
    independent layers never share inode bookkeeping.
    """

    def __init__(
        self,
        target: Union[str, Path, BinaryIO],
        compression: CompressionKind = CompressionKind.UNCOMPRESSED,
    ):
        if compression not in _WRITE_MODES:
            raise ValueError(f"Cannot write layers with compression: {compression.value}")

        mode = _WRITE_MODES[compression]
        if isinstance(target, (str, Path)):
            self.tar = tarfile.open(str(target), mode)
        else:
            self.tar = tarfile.open(fileobj=target, mode=mode)

        self.hardlinks = HardlinkTable()

    def add(self, source_path: Union[str, Path], arcname: Optional[str] = None):
        """Adds a single file, directory or link without recursing."""
        p = Path(source_path)
        name = (arcname or p.name).replace("\\", "/")
        add_path(p, name, self.hardlinks, self.tar)

    def add_record(self, record: FileRecord):
        add_to_tar(record, self.hardlinks, self.tar)

    def whiteout(self, arcname: str):
        whiteout(arcname, self.tar)

    def add_directory(self, directory: Union[str, Path], arc_prefix: str = ""):
        """
        Adds the contents of `directory` (not the directory itself) in a
        deterministic order. Directory symlinks are stored, not followed.
        """
        root = Path(directory)
        if not root.is_dir():
            raise NotADirectoryError(f"{directory} is not a valid directory.")

        stack = [(root, arc_prefix.strip("/"))]
        while stack:
            curr_dir, prefix = stack.pop()
            # sorted(os.listdir) to guarantee order
            for name in sorted(os.listdir(curr_dir)):
                full_path = curr_dir / name
                arc_name = f"{prefix}/{name}" if prefix else name
                self.add(full_path, arc_name)

                if full_path.is_dir() and not full_path.is_symlink():
                    stack.append((full_path, arc_name))

    def close(self):
        self.tar.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
