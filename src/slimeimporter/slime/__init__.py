"""Slime world format encoding."""

from .constants import (
    SLIME_HEADER,
    SLIME_VERSION,
    SLIME_FILE_SUFFIX,
    DEFAULT_COMPRESSION_LEVEL,
    TILE_ENTITIES_TAG,
    ENTITIES_TAG,
)
from .encoder import (
    WorldBounds,
    SlimeEncoder,
    sort_key,
    sort_chunks,
    compute_bounds,
    bitset_to_bytes,
    build_chunk_bitset,
    serialize_chunk,
    serialize_chunks,
    serialize_compound_list,
    encode_world,
)
from .writer import write_slime_file

__all__ = [
    # Constants
    "SLIME_HEADER",
    "SLIME_VERSION",
    "SLIME_FILE_SUFFIX",
    "DEFAULT_COMPRESSION_LEVEL",
    "TILE_ENTITIES_TAG",
    "ENTITIES_TAG",
    # Encoder
    "WorldBounds",
    "SlimeEncoder",
    "sort_key",
    "sort_chunks",
    "compute_bounds",
    "bitset_to_bytes",
    "build_chunk_bitset",
    "serialize_chunk",
    "serialize_chunks",
    "serialize_compound_list",
    "encode_world",
    # Writer
    "write_slime_file",
]
