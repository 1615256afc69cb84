import os
import stat as stat_module
from pathlib import Path
from typing import Tuple, Union

from layertar.enums import EntryKind
from layertar.schemas import FileIdentity, FileRecord

try:
    import grp
    import pwd
except ImportError:
    pwd = None
    grp = None


class FileRecordFactory:
    """
    Exclusively responsible for inspecting the file system
    and instantiating FileRecord snapshots.

    Centralizes:
    1. Usage of lstat (to avoid following symlinks).
    2. Type classification (EntryKind).
    3. Metadata extraction (Users, Groups, Permissions, Identity).
    """

    @classmethod
    def create(
        cls,
        source_path: Union[Path, str],
        arcname: str,
        anonymize: bool = False,
    ) -> FileRecord:
        """
        Analyzes a path and creates a FileRecord.
        Sockets are returned too; the writer decides to skip them.
        Raises OSError/FileNotFoundError if there are access issues.
        """
        st = os.lstat(source_path)
        return cls.from_stat(source_path, arcname, st, anonymize=anonymize)

    @classmethod
    def from_stat(
        cls,
        source_path: Union[Path, str],
        arcname: str,
        st: os.stat_result,
        anonymize: bool = False,
    ) -> FileRecord:
        kind = EntryKind.from_mode(st.st_mode)
        uid, gid, uname, gname = cls._extract_owner(st)

        devmajor = devminor = 0
        if kind in (EntryKind.CHAR_DEVICE, EntryKind.BLOCK_DEVICE):
            devmajor = os.major(st.st_rdev)
            devminor = os.minor(st.st_rdev)

        return FileRecord(
            source_path=str(source_path),
            arc_path=arcname,
            kind=kind,
            size=st.st_size if kind is EntryKind.REGULAR else 0,
            mtime=st.st_mtime,
            # S_IMODE drops the type bits, keeping permissions (0o755, 0o4755...)
            mode=stat_module.S_IMODE(st.st_mode),
            uid=0 if anonymize else uid,
            gid=0 if anonymize else gid,
            uname="root" if anonymize else uname,
            gname="root" if anonymize else gname,
            identity=FileIdentity.from_stat(st),
            devmajor=devmajor,
            devminor=devminor,
        )

    @staticmethod
    def _extract_owner(st: os.stat_result) -> Tuple[int, int, str, str]:
        """Gets uid, gid, uname, gname safely."""
        uid = st.st_uid
        gid = st.st_gid
        uname = ""
        gname = ""

        if pwd:
            try:
                uname = pwd.getpwuid(uid).pw_name  # type: ignore
            except (KeyError, AttributeError):
                uname = str(uid)

        if grp:
            try:
                gname = grp.getgrgid(gid).gr_name  # type: ignore
            except (KeyError, AttributeError):
                gname = str(gid)

        return uid, gid, uname, gname
