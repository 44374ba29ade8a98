"""Encoding of decoded chunks into a Slime Format container.

Container layout (all integers big-endian):
- Header: 0xB10B magic (2 bytes) + version (1 byte)
- minX (short), minZ (short), width (ushort), depth (ushort)
- Chunk bitset: ceil(width * depth / 8) bytes, LSB-first
- Chunks: compressed length (int) + raw length (int) + zstd data
- Tile entities: same framing, NBT root holding a "tiles" list
- hasEntities (byte), then the "entities" block with the same framing
- Extra data: compressed length 0 + raw length 0

The whole world must be in memory: the header depends on the bounding
box of every chunk.
"""

import io
import logging
import struct
from dataclasses import dataclass
from typing import Iterable, List, Sequence

import nbtlib
import numpy as np
import zstandard as zstd

from ..anvil.chunk import Chunk
from ..errors import EmptyWorldError, WorldTooLarge
from .constants import (
    DEFAULT_COMPRESSION_LEVEL,
    ENTITIES_TAG,
    MAX_COORDINATE,
    MAX_EXTENT,
    MAX_X_EXTENT,
    MIN_COORDINATE,
    SECTION_MASK_SIZE,
    SLIME_HEADER,
    SLIME_VERSION,
    SORT_KEY_MAX,
    SORT_KEY_MIN,
    TILE_ENTITIES_TAG,
)

logger = logging.getLogger(__name__)

_BOUNDS = struct.Struct(">hhHH")
_BLOCK_LENGTHS = struct.Struct(">II")


@dataclass(frozen=True)
class WorldBounds:
    """Chunk-coordinate bounding rectangle of a world."""
    min_x: int
    min_z: int
    width: int
    depth: int

    @property
    def max_x(self) -> int:
        return self.min_x + self.width - 1

    @property
    def max_z(self) -> int:
        return self.min_z + self.depth - 1

    @property
    def bitset_size(self) -> int:
        """Bytes needed for one bit per cell."""
        return (self.width * self.depth + 7) // 8

    def bit_index(self, x: int, z: int) -> int:
        """Bitset index of the cell holding chunk (x, z)."""
        return (z - self.min_z) * self.width + (x - self.min_x)


def sort_key(chunk: Chunk) -> int:
    """Composite ordering key ``z * MAX_X_EXTENT + x``.

    Raises:
        WorldTooLarge: The key does not fit a signed 64-bit integer.
    """
    key = chunk.z * MAX_X_EXTENT + chunk.x
    if not SORT_KEY_MIN <= key <= SORT_KEY_MAX:
        raise WorldTooLarge(f"Chunk ({chunk.x}, {chunk.z}) is outside the sortable coordinate range")
    return key


def sort_chunks(chunks: Iterable[Chunk]) -> List[Chunk]:
    """Sort chunks by z, then x."""
    return sorted(chunks, key=sort_key)


def compute_bounds(chunks: Sequence[Chunk]) -> WorldBounds:
    """Compute the bounding rectangle of a set of chunks.

    Raises:
        EmptyWorldError: There are no chunks.
        WorldTooLarge: minX/minZ do not fit a short, or width/depth do not
            fit an unsigned short.
    """
    if not chunks:
        raise EmptyWorldError("World contains no chunks")

    min_x = min(chunk.x for chunk in chunks)
    min_z = min(chunk.z for chunk in chunks)
    max_x = max(chunk.x for chunk in chunks)
    max_z = max(chunk.z for chunk in chunks)

    width = max_x - min_x + 1
    depth = max_z - min_z + 1

    if not (MIN_COORDINATE <= min_x <= MAX_COORDINATE and MIN_COORDINATE <= min_z <= MAX_COORDINATE):
        raise WorldTooLarge(f"Lowest chunk coordinates ({min_x}, {min_z}) do not fit in 16 bits")
    if width > MAX_EXTENT or depth > MAX_EXTENT:
        raise WorldTooLarge(f"World is {width}x{depth} chunks; at most {MAX_EXTENT}x{MAX_EXTENT} is supported")

    return WorldBounds(min_x=min_x, min_z=min_z, width=width, depth=depth)


def bitset_to_bytes(indexes: Iterable[int], size: int) -> bytes:
    """Pack bit indexes into ``size`` bytes, LSB-first within each byte."""
    bits = bytearray(size)
    for i in indexes:
        bits[i >> 3] |= 1 << (i & 7)
    return bytes(bits)


def build_chunk_bitset(chunks: Iterable[Chunk], bounds: WorldBounds) -> bytes:
    """Presence bitset with one bit per cell of the bounding rectangle."""
    return bitset_to_bytes(
        (bounds.bit_index(chunk.x, chunk.z) for chunk in chunks),
        bounds.bitset_size,
    )


def serialize_chunk(chunk: Chunk) -> bytes:
    """Serialize one chunk's height map, biomes and sections."""
    buf = bytearray()
    buf.extend(np.asarray(chunk.height_map, dtype=">i4").tobytes())
    buf.extend(chunk.biomes)

    mask = chunk.section_mask()
    buf.extend(bitset_to_bytes(
        (i for i in range(len(chunk.sections)) if mask >> i & 1),
        SECTION_MASK_SIZE,
    ))

    for section in chunk.sections:
        if section is None:
            continue
        buf.extend(section.serialize())
    return bytes(buf)


def serialize_chunks(chunks: Iterable[Chunk]) -> bytes:
    """Serialize chunks back to back, in the given order."""
    buf = bytearray()
    for chunk in chunks:
        buf.extend(serialize_chunk(chunk))
    return bytes(buf)


def serialize_compound_list(name: str, records: List[nbtlib.Compound]) -> bytes:
    """Serialize an unnamed NBT root whose only field is a list of compounds."""
    root = nbtlib.File({name: nbtlib.List[nbtlib.Compound](records)})
    buf = io.BytesIO()
    root.write(buf, byteorder="big")
    return buf.getvalue()


class SlimeEncoder:
    """Builds Slime Format containers.

    Attributes:
        compression_level: zstd level used for every compressed block
    """

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL):
        self.compression_level = compression_level
        self._cctx = zstd.ZstdCompressor(level=compression_level)

    def compress(self, data: bytes) -> bytes:
        return self._cctx.compress(data)

    def _write_block(self, out: bytearray, raw: bytes) -> None:
        compressed = self.compress(raw)
        out.extend(_BLOCK_LENGTHS.pack(len(compressed), len(raw)))
        out.extend(compressed)

    def encode(self, chunks: Iterable[Chunk]) -> bytes:
        """Encode chunks into a complete Slime container.

        Raises:
            EmptyWorldError: No chunks were given.
            WorldTooLarge: The coordinates overflow the header fields.
        """
        sorted_chunks = sort_chunks(chunks)
        bounds = compute_bounds(sorted_chunks)
        logger.debug(
            "Encoding %d chunks, bounds (%d, %d) size %dx%d",
            len(sorted_chunks), bounds.min_x, bounds.min_z, bounds.width, bounds.depth,
        )

        out = bytearray()

        # File header and Slime version
        out.extend(SLIME_HEADER)
        out.append(SLIME_VERSION)

        # Lowest chunk coordinates, width and depth
        out.extend(_BOUNDS.pack(bounds.min_x, bounds.min_z, bounds.width, bounds.depth))

        # Chunk bitmask
        out.extend(build_chunk_bitset(sorted_chunks, bounds))

        # Chunks
        self._write_block(out, serialize_chunks(sorted_chunks))

        # Tile entities (always present)
        tile_entities = [tile for chunk in sorted_chunks for tile in chunk.tile_entities]
        self._write_block(out, serialize_compound_list(TILE_ENTITIES_TAG, tile_entities))

        # Entities (only if there are any)
        entities = [entity for chunk in sorted_chunks for entity in chunk.entities]
        out.append(1 if entities else 0)
        if entities:
            self._write_block(out, serialize_compound_list(ENTITIES_TAG, entities))

        # Extra data, not populated
        out.extend(_BLOCK_LENGTHS.pack(0, 0))

        return bytes(out)


def encode_world(chunks: Iterable[Chunk], compression_level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """Encode chunks into a Slime container with a fresh encoder."""
    return SlimeEncoder(compression_level).encode(chunks)
