"""Chunk records and decoding of the Anvil ``Level`` compound.

Only the pre-1.13 layout is understood: ``xPos``/``zPos`` ints, a
``Biomes`` byte array, a ``HeightMap`` int array and a ``Sections`` list
of compounds carrying ``Blocks``/``Data``/``BlockLight``/``SkyLight``.
Chunks stored in any other layout decode to ``None`` and are skipped.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import nbtlib
import numpy as np

from ..errors import MalformedChunkData
from .constants import (
    BIOMES_SIZE,
    BLOCKS_PER_SECTION,
    HEIGHT_MAP_SIZE,
    NIBBLES_PER_SECTION,
    SECTIONS_PER_CHUNK,
)
from .nibble import NibbleArray
from .section import ChunkSection, is_empty_section

logger = logging.getLogger(__name__)


@dataclass
class Chunk:
    """A 16-section chunk column.

    Attributes:
        x: Chunk X coordinate
        z: Chunk Z coordinate
        sections: 16 slots, ``None`` where the section is absent
        height_map: 256 height values
        biomes: 256 biome id bytes
        tile_entities: Tile entity compounds, carried verbatim
        entities: Entity compounds, carried verbatim
    """
    x: int
    z: int
    sections: List[Optional[ChunkSection]]
    height_map: List[int]
    biomes: bytes
    tile_entities: List[nbtlib.Compound] = field(default_factory=list)
    entities: List[nbtlib.Compound] = field(default_factory=list)

    def __post_init__(self):
        if len(self.sections) != SECTIONS_PER_CHUNK:
            raise ValueError(f"Chunk must have {SECTIONS_PER_CHUNK} section slots, got {len(self.sections)}")
        if len(self.height_map) != HEIGHT_MAP_SIZE:
            raise ValueError(f"Height map must have {HEIGHT_MAP_SIZE} entries, got {len(self.height_map)}")
        if len(self.biomes) != BIOMES_SIZE:
            raise ValueError(f"Biomes must be {BIOMES_SIZE} bytes, got {len(self.biomes)}")

    def section_mask(self) -> int:
        """Bitmask with bit ``i`` set when section ``i`` is present."""
        mask = 0
        for i, section in enumerate(self.sections):
            if section is not None:
                mask |= 1 << i
        return mask


def _typed(compound: nbtlib.Compound, name: str, tag_type: type):
    """Return ``compound[name]`` if it exists and has the expected tag type."""
    value = compound.get(name)
    if isinstance(value, tag_type):
        return value
    return None


def _byte_array(compound: nbtlib.Compound, name: str, size: int, index: Optional[int]) -> bytes:
    value = _typed(compound, name, nbtlib.ByteArray)
    if value is None:
        raise MalformedChunkData(f"section is missing byte array '{name}'", index)
    data = np.asarray(value, dtype=np.int8).tobytes()
    if len(data) != size:
        raise MalformedChunkData(f"'{name}' must be {size} bytes, got {len(data)}", index)
    return data


def _compound_list(level: nbtlib.Compound, name: str, index: Optional[int]) -> List[nbtlib.Compound]:
    value = level.get(name)
    if value is None:
        return []
    if not isinstance(value, nbtlib.List):
        raise MalformedChunkData(f"'{name}' is not a list", index)
    records = list(value)
    for record in records:
        if not isinstance(record, nbtlib.Compound):
            raise MalformedChunkData(f"'{name}' holds a non-compound entry", index)
    return records


def read_section(tag: nbtlib.Compound, index: Optional[int] = None) -> Tuple[int, Optional[ChunkSection]]:
    """Read one entry of the ``Sections`` list.

    Returns:
        Tuple of (section Y index, section), where the section is None if
        all of its blocks are zero. The Y index is -1 for skipped sections.
    """
    if not isinstance(tag, nbtlib.Compound):
        raise MalformedChunkData("section entry is not a compound", index)

    blocks = _byte_array(tag, "Blocks", BLOCKS_PER_SECTION, index)
    if is_empty_section(blocks):
        return -1, None

    data = _byte_array(tag, "Data", NIBBLES_PER_SECTION, index)
    block_light = _byte_array(tag, "BlockLight", NIBBLES_PER_SECTION, index)
    sky_light = _byte_array(tag, "SkyLight", NIBBLES_PER_SECTION, index)

    y = tag.get("Y")
    if not isinstance(y, int):
        raise MalformedChunkData("section is missing its 'Y' index", index)
    y = int(y)
    if not 0 <= y < SECTIONS_PER_CHUNK:
        raise MalformedChunkData(f"section Y index out of range: {y}", index)

    section = ChunkSection(
        blocks=blocks,
        data=NibbleArray.from_backing(data),
        block_light=NibbleArray.from_backing(block_light),
        sky_light=NibbleArray.from_backing(sky_light),
    )
    return y, section


def decode_level(level: nbtlib.Compound, index: Optional[int] = None) -> Optional[Chunk]:
    """Build a Chunk from a ``Level`` compound.

    Args:
        level: The chunk's ``Level`` compound
        index: Region header slot, used in error messages

    Returns:
        The chunk, or None if the layout is not understood or every
        section is empty.

    Raises:
        MalformedChunkData: Present fields have the wrong size, a section
            lacks data, or a section Y index is outside 0-15.
    """
    x = _typed(level, "xPos", nbtlib.Int)
    z = _typed(level, "zPos", nbtlib.Int)
    biomes = _typed(level, "Biomes", nbtlib.ByteArray)
    height_map = _typed(level, "HeightMap", nbtlib.IntArray)
    sections_tag = _typed(level, "Sections", nbtlib.List)

    if x is None or z is None or biomes is None or height_map is None or sections_tag is None:
        logger.debug("Skipping chunk in slot %s: unsupported chunk layout", index)
        return None

    biome_bytes = np.asarray(biomes, dtype=np.int8).tobytes()
    if len(biome_bytes) != BIOMES_SIZE:
        raise MalformedChunkData(f"'Biomes' must be {BIOMES_SIZE} bytes, got {len(biome_bytes)}", index)
    heights = np.asarray(height_map, dtype=np.int32).tolist()
    if len(heights) != HEIGHT_MAP_SIZE:
        raise MalformedChunkData(f"'HeightMap' must have {HEIGHT_MAP_SIZE} entries, got {len(heights)}", index)

    sections: List[Optional[ChunkSection]] = [None] * SECTIONS_PER_CHUNK
    for tag in sections_tag:
        y, section = read_section(tag, index)
        if section is not None:
            sections[y] = section

    if all(section is None for section in sections):
        logger.debug("Skipping empty chunk (%d, %d)", int(x), int(z))
        return None

    return Chunk(
        x=int(x),
        z=int(z),
        sections=sections,
        height_map=heights,
        biomes=biome_bytes,
        tile_entities=_compound_list(level, "TileEntities", index),
        entities=_compound_list(level, "Entities", index),
    )
