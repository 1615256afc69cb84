"""Exceptions raised while building or unpacking layer archives."""

from .enums import CompressionKind


class LayerTarError(Exception):
    """Base exception for all layertar errors."""

    pass


class NotATarArchiveError(LayerTarError):
    """Raised when a path is neither a compressed nor an uncompressed tar."""

    pass


class UnsupportedCompressionError(LayerTarError):
    """Raised when an archive uses a compression we cannot unpack."""

    def __init__(self, path: str, kind: CompressionKind):
        super().__init__(f"Unsupported compression '{kind.value}' for archive: {path}")
        self.path = path
        self.kind = kind


class ArchiveReadError(LayerTarError):
    """Raised when a tar stream is malformed during extraction."""

    pass


class UnsafeEntryError(LayerTarError):
    """Raised when an entry would be written outside the destination."""

    pass
