import os
import tarfile
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .enums import CompressionKind, EntryKind


class FileIdentity(BaseModel):
    """Storage identity of a filesystem object (device + inode)."""

    model_config = ConfigDict(frozen=True)

    device: int
    inode: int
    nlink: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> Optional["FileIdentity"]:
        # Platforms that cannot report inodes (e.g. some Windows filesystems) give 0.
        if not st.st_ino:
            return None
        return cls(device=st.st_dev, inode=st.st_ino, nlink=st.st_nlink)

    @property
    def key(self) -> Tuple[int, int]:
        return (self.device, self.inode)


class FileRecord(BaseModel):
    """Snapshot of a filesystem entry about to be written to a layer."""

    model_config = ConfigDict(frozen=True)

    source_path: str  # Physical path on disk
    arc_path: str  # Path inside the TAR
    kind: EntryKind
    size: int = 0
    mtime: float = 0
    mode: int = 0o644
    uid: int = 0
    gid: int = 0
    uname: str = ""
    gname: str = ""
    identity: Optional[FileIdentity] = None
    linkname: str = ""
    devmajor: int = 0
    devminor: int = 0

    @property
    def is_regular(self) -> bool:
        return self.kind is EntryKind.REGULAR

    @property
    def has_multiple_links(self) -> bool:
        return self.identity is not None and self.identity.nlink > 1

    def as_tarinfo(self, linkname: str = "") -> tarfile.TarInfo:
        """Converts the record into a TarInfo header named after arc_path."""
        info = tarfile.TarInfo(name=self.arc_path)
        info.type = self.kind.tar_type
        info.mode = self.mode
        info.mtime = int(self.mtime)
        info.uid = self.uid
        info.gid = self.gid
        info.uname = self.uname
        info.gname = self.gname

        # Only regular files carry a body
        info.size = self.size if self.is_regular else 0

        if self.kind is EntryKind.SYMLINK:
            info.linkname = linkname or self.linkname
        elif self.kind in (EntryKind.CHAR_DEVICE, EntryKind.BLOCK_DEVICE):
            info.devmajor = self.devmajor
            info.devminor = self.devminor
        return info


class ArchiveClassification(BaseModel):
    """Result of sniffing a candidate archive on disk."""

    path: str
    compressed: bool
    compression: CompressionKind
    uncompressed_tar: bool

    @property
    def is_local_tar_archive(self) -> bool:
        return self.compressed or self.uncompressed_tar
