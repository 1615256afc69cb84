"""Build and unpack tar archives used as container image layers."""

import logging

from .enums import CompressionKind, EntryKind
from .exceptions import (
    ArchiveReadError,
    LayerTarError,
    NotATarArchiveError,
    UnsafeEntryError,
    UnsupportedCompressionError,
)
from .factory import FileRecordFactory
from .hardlinks import HardlinkTable, check_hardlink
from .schemas import ArchiveClassification, FileIdentity, FileRecord
from .sniffer import (
    classify,
    detect_compression,
    is_compressed_tar,
    is_local_tar_archive,
    is_uncompressed_tar,
)
from .unpacker import unpack_compressed_tar, unpack_local_tar_archive, untar
from .writer import LayerWriter, add_path, add_to_tar, whiteout

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArchiveClassification",
    "ArchiveReadError",
    "CompressionKind",
    "EntryKind",
    "FileIdentity",
    "FileRecord",
    "FileRecordFactory",
    "HardlinkTable",
    "LayerTarError",
    "LayerWriter",
    "NotATarArchiveError",
    "UnsafeEntryError",
    "UnsupportedCompressionError",
    "add_path",
    "add_to_tar",
    "check_hardlink",
    "classify",
    "detect_compression",
    "is_compressed_tar",
    "is_local_tar_archive",
    "is_uncompressed_tar",
    "unpack_compressed_tar",
    "unpack_local_tar_archive",
    "untar",
    "whiteout",
]
