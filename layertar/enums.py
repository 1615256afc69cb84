import stat as stat_module
import tarfile
from enum import Enum


class CompressionKind(str, Enum):
    """Compression detected on a candidate archive."""

    UNCOMPRESSED = "uncompressed"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    XZ = "xz"
    ZSTD = "zstd"
    # The file could not be opened or read.
    UNKNOWN = "unknown"

    @property
    def is_compressed(self) -> bool:
        return self not in (CompressionKind.UNCOMPRESSED, CompressionKind.UNKNOWN)


class EntryKind(str, Enum):
    """Closed set of entry kinds a layer can contain."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    FIFO = "fifo"
    CHAR_DEVICE = "char_device"
    BLOCK_DEVICE = "block_device"
    SOCKET = "socket"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        """Kind of a filesystem object from its full st_mode."""
        if stat_module.S_ISREG(mode):
            return cls.REGULAR
        if stat_module.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat_module.S_ISLNK(mode):
            return cls.SYMLINK
        if stat_module.S_ISFIFO(mode):
            return cls.FIFO
        if stat_module.S_ISCHR(mode):
            return cls.CHAR_DEVICE
        if stat_module.S_ISBLK(mode):
            return cls.BLOCK_DEVICE
        if stat_module.S_ISSOCK(mode):
            return cls.SOCKET
        raise ValueError(f"Unsupported file mode: {oct(mode)}")

    @classmethod
    def from_tarinfo(cls, member: tarfile.TarInfo) -> "EntryKind":
        """Kind of a tar member. Sparse and contiguous files count as regular."""
        if member.islnk():
            return cls.HARDLINK
        if member.issym():
            return cls.SYMLINK
        if member.isdir():
            return cls.DIRECTORY
        if member.isfifo():
            return cls.FIFO
        if member.ischr():
            return cls.CHAR_DEVICE
        if member.isblk():
            return cls.BLOCK_DEVICE
        if member.isreg():
            return cls.REGULAR
        raise ValueError(f"Unsupported tar member type {member.type!r}: {member.name}")

    @property
    def tar_type(self) -> bytes:
        if self not in _TAR_TYPES:
            raise ValueError(
                f"Entries of kind '{self.value}' cannot be stored in a tar archive"
            )
        return _TAR_TYPES[self]


_TAR_TYPES = {
    EntryKind.REGULAR: tarfile.REGTYPE,
    EntryKind.DIRECTORY: tarfile.DIRTYPE,
    EntryKind.SYMLINK: tarfile.SYMTYPE,
    EntryKind.HARDLINK: tarfile.LNKTYPE,
    EntryKind.FIFO: tarfile.FIFOTYPE,
    EntryKind.CHAR_DEVICE: tarfile.CHRTYPE,
    EntryKind.BLOCK_DEVICE: tarfile.BLKTYPE,
}
