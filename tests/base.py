import io
import os
import shutil
import tarfile
import tempfile
import unittest
from pathlib import Path
from typing import Dict, List, Tuple

from layertar.hardlinks import HardlinkTable


class LayerTarTestCase(unittest.TestCase):
    """Base class for all layertar tests."""

    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.data_dir = self.tmp / "dataset"
        self.data_dir.mkdir()

    def tearDown(self):
        if self.tmp.exists():
            shutil.rmtree(self.tmp)

    def create_file(self, rel_path: str, content: str = "data") -> Path:
        p = self.data_dir / rel_path
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content)
        return p

    def open_buffer(self) -> Tuple[io.BytesIO, tarfile.TarFile, HardlinkTable]:
        """Returns an in-memory tar opened for writing plus a fresh hardlink table."""
        buffer = io.BytesIO()
        tar = tarfile.open(fileobj=buffer, mode="w")
        return buffer, tar, HardlinkTable()

    def read_members(self, buffer: io.BytesIO) -> List[tarfile.TarInfo]:
        buffer.seek(0)
        with tarfile.open(fileobj=buffer, mode="r:") as tf:
            return tf.getmembers()

    def read_contents(self, buffer: io.BytesIO) -> Dict[str, bytes]:
        """Maps member name to body bytes for every regular member."""
        buffer.seek(0)
        contents = {}
        with tarfile.open(fileobj=buffer, mode="r:") as tf:
            for member in tf.getmembers():
                if member.isreg():
                    f = tf.extractfile(member)
                    assert f is not None
                    contents[member.name] = f.read()
        return contents

    def snapshot_tree(self, root: Path) -> Dict[str, Tuple[str, object]]:
        """Describes a tree as {relative path: (kind, payload)} for comparisons."""
        tree = {}
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames + filenames:
                full = Path(dirpath) / name
                rel = full.relative_to(root).as_posix()
                if full.is_symlink():
                    tree[rel] = ("symlink", os.readlink(full))
                elif full.is_dir():
                    tree[rel] = ("dir", None)
                else:
                    tree[rel] = ("file", full.read_bytes())
        return tree
