"""Error types raised while importing a world.

Per-chunk and per-file errors are caught by the world assembler and the
affected unit is skipped. Whole-world errors abort the import.
"""

from pathlib import Path
from typing import Optional


class SlimeImporterError(Exception):
    """Base class for all importer errors."""


class MalformedChunkData(SlimeImporterError):
    """A chunk payload is missing required data or cannot be parsed."""

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"chunk slot {index}: {message}"
        super().__init__(message)


class UnsupportedCompressionScheme(MalformedChunkData):
    """A chunk uses a compression byte other than gzip (1) or zlib (2)."""

    def __init__(self, scheme: int, index: Optional[int] = None):
        self.scheme = scheme
        super().__init__(f"unsupported compression scheme {scheme}", index)


class RegionFileUnreadable(SlimeImporterError):
    """A region file could not be read or has a truncated header."""

    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        name = path.name if path is not None else "<memory>"
        super().__init__(f"{name}: {reason}")


class WorldTooLarge(SlimeImporterError):
    """Chunk coordinates do not fit the container's fixed-width fields."""


class EmptyWorldError(SlimeImporterError):
    """The world holds no chunk with at least one non-empty section."""


class InvalidWorldError(SlimeImporterError):
    """The world directory does not look like an Anvil world."""


class ContainerWriteFailure(SlimeImporterError):
    """The encoded world could not be written to disk."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to save {path}: {reason}")
