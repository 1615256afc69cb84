import bz2
import gzip
import io
import lzma
import tarfile

from layertar.enums import CompressionKind
from layertar.sniffer import (
    classify,
    detect_compression,
    is_compressed_tar,
    is_local_tar_archive,
    is_uncompressed_tar,
)
from tests.base import LayerTarTestCase


class TestDetectCompression(LayerTarTestCase):
    def test_known_signatures(self):
        cases = {
            gzip.compress(b"payload"): CompressionKind.GZIP,
            bz2.compress(b"payload"): CompressionKind.BZIP2,
            lzma.compress(b"payload", format=lzma.FORMAT_XZ): CompressionKind.XZ,
            b"\x28\xb5\x2f\xfd\x00\x00": CompressionKind.ZSTD,
            b"plain text": CompressionKind.UNCOMPRESSED,
            b"": CompressionKind.UNCOMPRESSED,
        }
        for data, expected in cases.items():
            with self.subTest(expected=expected):
                self.assertEqual(detect_compression(data), expected)

    def test_compressed_kinds(self):
        self.assertTrue(CompressionKind.GZIP.is_compressed)
        self.assertTrue(CompressionKind.ZSTD.is_compressed)
        self.assertFalse(CompressionKind.UNCOMPRESSED.is_compressed)
        self.assertFalse(CompressionKind.UNKNOWN.is_compressed)


class TestClassify(LayerTarTestCase):
    def _write_tar(self, name: str, mode: str = "w"):
        self.create_file("member.txt", "member")
        path = self.tmp / name
        with tarfile.open(path, mode) as tf:
            tf.add(self.data_dir / "member.txt", arcname="member.txt")
        return path

    def test_uncompressed_tar(self):
        path = self._write_tar("layer.tar")

        result = classify(path)
        self.assertFalse(result.compressed)
        self.assertEqual(result.compression, CompressionKind.UNCOMPRESSED)
        self.assertTrue(result.uncompressed_tar)
        self.assertTrue(result.is_local_tar_archive)

    def test_gzip_tar(self):
        path = self._write_tar("layer.tar.gz", "w:gz")

        self.assertEqual(is_compressed_tar(path), (True, CompressionKind.GZIP))
        self.assertFalse(is_uncompressed_tar(path))
        self.assertTrue(is_local_tar_archive(path))

    def test_bzip2_tar(self):
        path = self._write_tar("layer.tar.bz2", "w:bz2")
        self.assertEqual(is_compressed_tar(path), (True, CompressionKind.BZIP2))

    def test_compressed_check_ignores_payload(self):
        """Only the magic bytes matter; the payload is not checked for tar structure."""
        path = self.tmp / "not-a-tar.gz"
        path.write_bytes(gzip.compress(b"just some text"))

        self.assertTrue(is_local_tar_archive(path))

    def test_zero_length_file(self):
        path = self.tmp / "empty"
        path.write_bytes(b"")

        result = classify(path)
        self.assertFalse(result.uncompressed_tar)
        self.assertFalse(result.is_local_tar_archive)

    def test_empty_archive_is_not_a_tar(self):
        path = self.tmp / "empty.tar"
        with tarfile.open(path, "w"):
            pass

        self.assertFalse(is_uncompressed_tar(path))

    def test_garbage_is_not_a_tar(self):
        path = self.tmp / "garbage.bin"
        path.write_bytes(b"this is definitely not a tar archive" * 40)

        result = classify(path)
        self.assertFalse(result.compressed)
        self.assertFalse(result.uncompressed_tar)
        self.assertFalse(is_local_tar_archive(path))

    def test_missing_file(self):
        missing = self.tmp / "missing.tar"

        self.assertEqual(is_compressed_tar(missing), (False, CompressionKind.UNKNOWN))
        self.assertFalse(is_uncompressed_tar(missing))
        self.assertFalse(is_local_tar_archive(missing))

    def test_in_memory_tar_written_to_disk(self):
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tf:
            info = tarfile.TarInfo("a/.wh.b")
            tf.addfile(info)
        path = self.tmp / "whiteout.tar"
        path.write_bytes(buffer.getvalue())

        self.assertTrue(is_uncompressed_tar(path))
