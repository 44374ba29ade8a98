"""Region file handling for the Anvil world format.

Region files (``r.<x>.<z>.mca``) hold up to 32x32 chunks:
- Location table: 1024 x 4-byte big-endian entries,
  ``(sector_offset << 8) | sector_count``; 0 means no chunk
- Timestamp table: 1024 x 4-byte entries (unused here)
- Chunk data: aligned to 4096-byte sectors

Chunk data format:
- 4 bytes: length L (big-endian), covering the scheme byte and payload
- 1 byte: compression scheme (1 = gzip, 2 = zlib)
- L - 1 bytes: compressed NBT, whose root holds a ``Level`` compound

Chunk entries are independent, so a region can be decoded on a thread
pool. Each entry produces a ChunkDecodeResult; one bad chunk never stops
the others.
"""

import gzip
import io
import logging
import os
import struct
import zlib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import nbtlib

from ..errors import (
    MalformedChunkData,
    RegionFileUnreadable,
    SlimeImporterError,
    UnsupportedCompressionScheme,
)
from .chunk import Chunk, decode_level
from .constants import (
    CHUNK_HEADER_SIZE,
    COMPRESSION_GZIP,
    COMPRESSION_ZLIB,
    HEADER_SIZE,
    REGION_CHUNK_COUNT,
    SECTOR_SIZE,
)

logger = logging.getLogger(__name__)

_LOCATION_TABLE = struct.Struct(f">{REGION_CHUNK_COUNT}I")
_CHUNK_HEADER = struct.Struct(">iB")


@dataclass(frozen=True)
class ChunkLocationEntry:
    """Location of one chunk inside a region file.

    Attributes:
        index: Slot in the location table (0-1023)
        byte_offset: Start of the chunk data in the file
        padded_length: Sector-aligned length reserved for the chunk
    """
    index: int
    byte_offset: int
    padded_length: int


@dataclass
class ChunkDecodeResult:
    """Outcome of decoding one location entry.

    ``chunk`` is None both on error and when the chunk is empty or in an
    unsupported layout; check ``error`` to tell them apart.
    """
    entry: ChunkLocationEntry
    chunk: Optional[Chunk] = None
    error: Optional[SlimeImporterError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def read_chunk_locations(data: bytes, path: Optional[Path] = None) -> List[ChunkLocationEntry]:
    """Read the present entries of a region's location table.

    Raises:
        RegionFileUnreadable: The file is shorter than the location table.
    """
    if len(data) < HEADER_SIZE:
        raise RegionFileUnreadable(path, f"truncated header ({len(data)} of {HEADER_SIZE} bytes)")

    entries = []
    for index, entry in enumerate(_LOCATION_TABLE.unpack_from(data, 0)):
        if entry == 0:
            continue
        sector_offset = entry >> 8
        sector_count = entry & 0xFF
        entries.append(ChunkLocationEntry(
            index=index,
            byte_offset=sector_offset * SECTOR_SIZE,
            padded_length=sector_count * SECTOR_SIZE,
        ))
    return entries


def read_chunk_payload(data: bytes, entry: ChunkLocationEntry) -> bytes:
    """Slice out and decompress one chunk's NBT payload.

    Raises:
        MalformedChunkData: The entry points past the end of the file or
            the payload does not decompress.
        UnsupportedCompressionScheme: The scheme byte is not gzip or zlib.
    """
    start = entry.byte_offset
    if start + CHUNK_HEADER_SIZE > len(data):
        raise MalformedChunkData(f"chunk offset {start} is past end of file ({len(data)} bytes)", entry.index)

    length, scheme = _CHUNK_HEADER.unpack_from(data, start)
    if length < 1:
        raise MalformedChunkData(f"invalid chunk length {length}", entry.index)
    payload_start = start + CHUNK_HEADER_SIZE
    payload_end = payload_start + length - 1
    if payload_end > len(data):
        raise MalformedChunkData(f"chunk data runs past end of file ({payload_end} > {len(data)})", entry.index)
    payload = data[payload_start:payload_end]

    try:
        if scheme == COMPRESSION_GZIP:
            return gzip.decompress(payload)
        if scheme == COMPRESSION_ZLIB:
            return zlib.decompress(payload)
    except (OSError, EOFError, zlib.error) as exc:
        raise MalformedChunkData(f"failed to decompress chunk: {exc}", entry.index) from exc
    raise UnsupportedCompressionScheme(scheme, entry.index)


def read_level(data: bytes, entry: ChunkLocationEntry) -> nbtlib.Compound:
    """Decompress and parse a chunk, returning its ``Level`` compound."""
    raw = read_chunk_payload(data, entry)
    try:
        root = nbtlib.File.parse(io.BytesIO(raw), byteorder="big")
    except (EOFError, struct.error, TypeError, ValueError, KeyError, IndexError, UnicodeDecodeError,
            RecursionError) as exc:
        raise MalformedChunkData(f"invalid NBT data: {exc}", entry.index) from exc

    level = root.get("Level")
    if not isinstance(level, nbtlib.Compound):
        raise MalformedChunkData("missing 'Level' compound", entry.index)
    return level


def decode_entry(data: bytes, entry: ChunkLocationEntry) -> ChunkDecodeResult:
    """Decode one location entry into a result value (never raises importer errors)."""
    try:
        chunk = decode_level(read_level(data, entry), entry.index)
    except SlimeImporterError as exc:
        return ChunkDecodeResult(entry=entry, error=exc)
    return ChunkDecodeResult(entry=entry, chunk=chunk)


def decode_region(
    data: bytes,
    path: Optional[Path] = None,
    parallel: bool = False,
    workers: Optional[int] = None,
) -> List[ChunkDecodeResult]:
    """Decode every present chunk of an in-memory region file.

    Args:
        data: Full region file contents
        path: Source path, used in error messages
        parallel: Decode entries on a thread pool
        workers: Pool size (defaults to CPU count)

    Returns:
        One result per present location entry, in table order

    Raises:
        RegionFileUnreadable: The location table is truncated.
    """
    entries = read_chunk_locations(data, path)
    if not parallel or len(entries) < 2:
        return [decode_entry(data, entry) for entry in entries]

    workers = workers or os.cpu_count() or 1
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda entry: decode_entry(data, entry), entries))


def read_region_file(
    path: Path,
    parallel: bool = False,
    workers: Optional[int] = None,
) -> List[ChunkDecodeResult]:
    """Read a region file from disk and decode its chunks.

    Raises:
        RegionFileUnreadable: The file cannot be read or is truncated.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise RegionFileUnreadable(Path(path), str(exc)) from exc
    return decode_region(data, Path(path), parallel=parallel, workers=workers)
