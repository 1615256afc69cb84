"""Classification of candidate archives on local disk."""

import logging
import os
import tarfile
from pathlib import Path
from typing import Tuple, Union

from .constants import (
    BZIP2_MAGIC,
    GZIP_MAGIC,
    SNIFF_PREFIX_SIZE,
    XZ_MAGIC,
    ZSTD_MAGIC,
)
from .enums import CompressionKind
from .schemas import ArchiveClassification

logger = logging.getLogger(__name__)

_SIGNATURES = (
    (BZIP2_MAGIC, CompressionKind.BZIP2),
    (GZIP_MAGIC, CompressionKind.GZIP),
    (XZ_MAGIC, CompressionKind.XZ),
    (ZSTD_MAGIC, CompressionKind.ZSTD),
)


def detect_compression(data: bytes) -> CompressionKind:
    """Classifies a byte prefix by its magic signature."""
    for magic, kind in _SIGNATURES:
        if data.startswith(magic):
            return kind
    return CompressionKind.UNCOMPRESSED


def is_compressed_tar(path: Union[str, Path]) -> Tuple[bool, CompressionKind]:
    """
    Checks the leading bytes of `path` for a known compression signature.

    Only the header is inspected; the decompressed payload is not validated
    as a tar stream. Returns (False, UNKNOWN) when the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            prefix = f.read(SNIFF_PREFIX_SIZE)
    except OSError as e:
        logger.debug(f"Cannot read {path} for compression sniffing: {e}")
        return False, CompressionKind.UNKNOWN

    kind = detect_compression(prefix)
    return kind.is_compressed, kind


def is_uncompressed_tar(path: Union[str, Path]) -> bool:
    """
    Returns True if the first tar header of `path` parses.

    Empty files, empty archives and anything tarfile refuses are not tars.
    """
    try:
        if os.stat(path).st_size == 0:
            return False
        with tarfile.open(str(path), mode="r:") as tf:
            return tf.next() is not None
    except (tarfile.TarError, OSError, EOFError, ValueError) as e:
        logger.debug(f"{path} is not an uncompressed tar: {e}")
        return False


def classify(path: Union[str, Path]) -> ArchiveClassification:
    """Runs both the compressed and the uncompressed checks on `path`."""
    compressed, kind = is_compressed_tar(path)
    return ArchiveClassification(
        path=str(path),
        compressed=compressed,
        compression=kind,
        uncompressed_tar=is_uncompressed_tar(path),
    )


def is_local_tar_archive(path: Union[str, Path]) -> bool:
    """Returns True if `path` is a compressed or uncompressed tar archive."""
    return classify(path).is_local_tar_archive
