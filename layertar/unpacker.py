import bz2
import gzip
import logging
import os
import posixpath
import shutil
import stat as stat_module
import tarfile
import zlib
from pathlib import Path
from typing import BinaryIO, Union

from .constants import CHUNK_SIZE_DEFAULT
from .enums import CompressionKind, EntryKind
from .exceptions import (
    ArchiveReadError,
    NotATarArchiveError,
    UnsafeEntryError,
    UnsupportedCompressionError,
)
from .sniffer import classify

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def unpack_local_tar_archive(path: PathLike, dest: PathLike):
    """
    Unpacks the tar archive at `path` into the directory `dest`.

    gzip and bzip2 archives are decompressed on the fly. Any other detected
    compression raises UnsupportedCompressionError. Raises NotATarArchiveError,
    without touching `dest`, if `path` is not a tar archive at all.
    """
    classification = classify(path)

    if classification.compressed:
        kind = classification.compression
        if kind is CompressionKind.GZIP:
            return unpack_compressed_tar(path, dest)
        if kind is CompressionKind.BZIP2:
            with open(path, "rb") as f, bz2.BZ2File(f) as bzr:
                return untar(bzr, dest)
        raise UnsupportedCompressionError(str(path), kind)

    if classification.uncompressed_tar:
        with open(path, "rb") as f:
            return untar(f, dest)

    raise NotATarArchiveError(f"path does not lead to local tar archive: {path}")


def unpack_compressed_tar(path: PathLike, dest: PathLike):
    """Unpacks the gzip-compressed tar at `path` into `dest`."""
    with open(path, "rb") as f, gzip.GzipFile(fileobj=f) as gzr:
        return untar(gzr, dest)


def untar(fileobj: BinaryIO, dest: PathLike):
    """Extracts every entry of the tar stream `fileobj` into `dest`."""
    dest = os.path.abspath(dest)
    logger.info(f"Unpacking tar stream into {dest}")

    os.makedirs(dest, exist_ok=True)
    directories = []
    count = 0
    try:
        with tarfile.open(fileobj=fileobj, mode="r|") as tf:
            for member in tf:
                target = extract_entry(tf, member, dest)
                if member.isdir():
                    directories.append((member, target))
                count += 1
    except (tarfile.TarError, EOFError, zlib.error) as e:
        raise ArchiveReadError(f"Failed to read tar stream: {e}") from e

    # Deepest first, so a parent's mtime is set after its children are done
    directories.sort(key=lambda item: item[1], reverse=True)
    for member, target in directories:
        # A later entry may have replaced the directory with a symlink
        if not os.path.islink(target):
            restore_attributes(member, target)

    logger.info(f"Unpacked {count} entries into {dest}")


def _resolve_target(dest: str, name: str) -> str:
    """Joins an archive name under `dest`, refusing anything that escapes it."""
    cleaned = posixpath.normpath(name.lstrip("/"))
    if cleaned == ".." or cleaned.startswith("../"):
        raise UnsafeEntryError(f"Refusing to extract outside destination: {name}")
    if cleaned in ("", "."):
        return dest

    target = os.path.join(dest, *cleaned.split("/"))
    # Symlinks already extracted into dest must not redirect the write
    _ensure_inside(dest, os.path.dirname(target), name)
    return target


def _ensure_inside(dest: str, path: str, name: str):
    real_dest = os.path.realpath(dest)
    if os.path.commonpath([os.path.realpath(path), real_dest]) != real_dest:
        raise UnsafeEntryError(f"Refusing to extract outside destination: {name}")


def _remove_existing(path: str):
    """Clears whatever is at `path` so a new non-directory entry can take its place."""
    if os.path.islink(path) or os.path.isfile(path):
        os.unlink(path)
    elif os.path.isdir(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.unlink(path)


def extract_entry(tf: tarfile.TarFile, member: tarfile.TarInfo, dest: str) -> str:
    """
    Materializes a single tar member under `dest` and returns its path.

    Directory permissions and times are left to the caller, so that a
    read-only directory can still receive the entries that follow it.
    """
    target = _resolve_target(dest, member.name)
    kind = EntryKind.from_tarinfo(member)
    logger.debug(f"Extracting {kind.value} {member.name} -> {target}")

    parent = os.path.dirname(target)
    if parent:
        os.makedirs(parent, exist_ok=True)

    if kind is EntryKind.DIRECTORY:
        if os.path.islink(target) or (
            os.path.lexists(target) and not os.path.isdir(target)
        ):
            os.unlink(target)
        os.makedirs(target, exist_ok=True)
        return target

    if kind is EntryKind.HARDLINK:
        link_target = _resolve_target(dest, member.linkname)
        _ensure_inside(dest, link_target, member.linkname)
        _remove_existing(target)
        # Attributes belong to the shared inode, already restored via the original.
        os.link(link_target, target)
        return target

    _remove_existing(target)
    if kind is EntryKind.REGULAR:
        src = tf.extractfile(member)
        if src is None:
            raise ArchiveReadError(f"Cannot read contents of {member.name}")
        with src, open(target, "wb") as dst:
            shutil.copyfileobj(src, dst, CHUNK_SIZE_DEFAULT)
    elif kind is EntryKind.SYMLINK:
        os.symlink(member.linkname, target)
    elif kind is EntryKind.FIFO:
        os.mkfifo(target, member.mode)
    else:
        if kind is EntryKind.CHAR_DEVICE:
            file_type = stat_module.S_IFCHR
        else:
            file_type = stat_module.S_IFBLK
        device = os.makedev(member.devmajor, member.devminor)
        os.mknod(target, member.mode | file_type, device)

    restore_attributes(member, target)
    return target


def restore_attributes(member: tarfile.TarInfo, target: str):
    """Applies ownership (as root only), permissions and mtime of `member`."""
    is_symlink = member.issym()

    if os.geteuid() == 0:
        os.lchown(target, member.uid, member.gid)

    # chown clears setuid/setgid bits, so permissions go after it
    if not is_symlink:
        os.chmod(target, member.mode)

    if is_symlink and os.utime not in os.supports_follow_symlinks:
        return
    os.utime(target, (member.mtime, member.mtime), follow_symlinks=False)
