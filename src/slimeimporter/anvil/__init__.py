"""Anvil world format reading."""

from .constants import (
    REGION_SIZE,
    REGION_CHUNK_COUNT,
    SECTOR_SIZE,
    SECTIONS_PER_CHUNK,
    BLOCKS_PER_SECTION,
    NIBBLES_PER_SECTION,
    HEIGHT_MAP_SIZE,
    BIOMES_SIZE,
    COMPRESSION_GZIP,
    COMPRESSION_ZLIB,
    index_block,
)
from .nibble import NibbleArray
from .section import ChunkSection, is_empty_section
from .chunk import Chunk, decode_level, read_section
from .region import (
    ChunkLocationEntry,
    ChunkDecodeResult,
    read_chunk_locations,
    read_chunk_payload,
    read_level,
    decode_entry,
    decode_region,
    read_region_file,
)
from .world import (
    LoadedWorld,
    RegionSummary,
    get_region_dir,
    find_region_files,
    load_chunks,
    load_world,
)

__all__ = [
    # Constants
    "REGION_SIZE",
    "REGION_CHUNK_COUNT",
    "SECTOR_SIZE",
    "SECTIONS_PER_CHUNK",
    "BLOCKS_PER_SECTION",
    "NIBBLES_PER_SECTION",
    "HEIGHT_MAP_SIZE",
    "BIOMES_SIZE",
    "COMPRESSION_GZIP",
    "COMPRESSION_ZLIB",
    "index_block",
    # Data model
    "NibbleArray",
    "ChunkSection",
    "is_empty_section",
    "Chunk",
    "decode_level",
    "read_section",
    # Region
    "ChunkLocationEntry",
    "ChunkDecodeResult",
    "read_chunk_locations",
    "read_chunk_payload",
    "read_level",
    "decode_entry",
    "decode_region",
    "read_region_file",
    # World
    "LoadedWorld",
    "RegionSummary",
    "get_region_dir",
    "find_region_files",
    "load_chunks",
    "load_world",
]
