"""Chunk sections for the pre-1.13 Anvil format.

A section is a 16x16x16 cube. Block ids are stored one byte per block
(``Blocks``), with metadata, block light and sky light packed into
nibble arrays (``Data``, ``BlockLight``, ``SkyLight``).

Serialization format (Slime chunk payload, per present section):
1. Block light nibbles (2048 bytes)
2. Block ids (4096 bytes)
3. Block data nibbles (2048 bytes)
4. Sky light nibbles (2048 bytes)
5. Reserved extension field (2 zero bytes)
"""

import struct
from dataclasses import dataclass
from typing import Union

import numpy as np

from .constants import BLOCKS_PER_SECTION, index_block
from .nibble import NibbleArray

RESERVED_SECTION_FIELD = struct.pack(">h", 0)


def is_empty_section(blocks: Union[bytes, bytearray, memoryview]) -> bool:
    """Check whether a section's block array holds only zero bytes.

    An all-air section and a missing section are indistinguishable here;
    both are dropped.
    """
    return not np.frombuffer(blocks, dtype=np.uint8).any()


@dataclass
class ChunkSection:
    """A 16x16x16 section of blocks within a chunk.

    Attributes:
        blocks: 4096 block id bytes
        data: Block metadata nibbles
        block_light: Emitted light nibbles
        sky_light: Sky light nibbles
    """
    blocks: bytes
    data: NibbleArray
    block_light: NibbleArray
    sky_light: NibbleArray

    def __post_init__(self):
        if len(self.blocks) != BLOCKS_PER_SECTION:
            raise ValueError(f"Section blocks must be {BLOCKS_PER_SECTION} bytes, got {len(self.blocks)}")
        self.blocks = bytes(self.blocks)

    def get_block(self, x: int, y: int, z: int) -> int:
        """Get block id at local coordinates (0-15)."""
        return self.blocks[index_block(x, y, z)]

    def serialize(self) -> bytes:
        """Serialize the section in Slime chunk payload order."""
        buf = bytearray()
        buf.extend(self.block_light.backing)
        buf.extend(self.blocks)
        buf.extend(self.data.backing)
        buf.extend(self.sky_light.backing)
        buf.extend(RESERVED_SECTION_FIELD)
        return bytes(buf)
