import logging
from typing import Dict, Optional, Tuple

from .enums import EntryKind
from .schemas import FileRecord

logger = logging.getLogger(__name__)

InodeKey = Tuple[int, int]


class HardlinkTable:
    """
    Maps a (device, inode) identity to the first archive path written with it.

    Scoped to a single archive-build pass: inode numbers are only meaningful
    within one snapshot of one filesystem. Not thread safe.
    """

    def __init__(self):
        self._paths: Dict[InodeKey, str] = {}

    def lookup(self, key: InodeKey) -> Optional[str]:
        return self._paths.get(key)

    def record(self, key: InodeKey, arc_path: str):
        self._paths[key] = arc_path

    def __contains__(self, key: InodeKey) -> bool:
        return key in self._paths

    def __len__(self) -> int:
        return len(self._paths)


def check_hardlink(
    arc_path: str, hardlinks: HardlinkTable, record: FileRecord
) -> Tuple[bool, str]:
    """
    Returns (True, original_path) if the record must be written as a hardlink
    to an entry already in the archive, (False, "") otherwise.

    The first path seen for an identity is remembered; revisiting that same
    path is not a hardlink.
    """
    identity = record.identity
    if identity is None or identity.nlink <= 1 or record.kind is EntryKind.DIRECTORY:
        return False, ""

    key = identity.key
    original = hardlinks.lookup(key)

    if original is None:
        hardlinks.record(key, arc_path)
        return False, ""

    if original == arc_path:
        return False, ""

    logger.debug(f"{arc_path} inode exists in hardlinks table, linking to {original}")
    return True, original
