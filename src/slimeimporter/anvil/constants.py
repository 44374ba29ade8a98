"""Constants for the Anvil (.mca) region format."""

# Region file layout
REGION_SIZE = 32  # 32x32 chunks per region
REGION_CHUNK_COUNT = REGION_SIZE * REGION_SIZE  # header slots
SECTOR_SIZE = 4096
HEADER_SIZE = REGION_CHUNK_COUNT * 4  # location table only
REGION_FILE_SUFFIX = ".mca"
REGION_DIR_NAME = "region"

# Chunk payload header: 4-byte length + 1-byte compression scheme
CHUNK_HEADER_SIZE = 5
COMPRESSION_GZIP = 1
COMPRESSION_ZLIB = 2

# Chunk dimensions
SECTIONS_PER_CHUNK = 16
BLOCKS_PER_SECTION = 4096  # 16*16*16
NIBBLES_PER_SECTION = BLOCKS_PER_SECTION // 2
COLUMNS_PER_CHUNK = 256  # 16*16
HEIGHT_MAP_SIZE = COLUMNS_PER_CHUNK
BIOMES_SIZE = COLUMNS_PER_CHUNK


def index_block(x: int, y: int, z: int) -> int:
    """Calculate block index within a section (YZX order)."""
    return (y & 0xF) << 8 | (z & 0xF) << 4 | (x & 0xF)
