CHUNK_SIZE_DEFAULT = 64 * 1024  # 64KB copy buffer

# Enough bytes to recognise every supported compression signature.
SNIFF_PREFIX_SIZE = 262

# Deleted paths are represented as "<dir>/.wh.<basename>" in a layer.
WHITEOUT_PREFIX = ".wh."

GZIP_MAGIC = b"\x1f\x8b\x08"
BZIP2_MAGIC = b"BZh"
XZ_MAGIC = b"\xfd\x37\x7a\x58\x5a\x00"
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
