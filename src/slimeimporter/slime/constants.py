"""Constants for the Slime world format."""

# File header
SLIME_HEADER = b"\xb1\x0b"  # 2-byte magic, as written by Slime World Manager
SLIME_VERSION = 3
SLIME_FILE_SUFFIX = ".slime"

# Header field ranges
MIN_COORDINATE = -32768  # signed 16-bit
MAX_COORDINATE = 32767
MAX_EXTENT = 65535  # unsigned 16-bit

# Chunk sort key: z * MAX_X_EXTENT + x
MAX_X_EXTENT = 2**31 - 1
SORT_KEY_MIN = -(2**63)
SORT_KEY_MAX = 2**63 - 1

# Per-chunk section presence mask
SECTION_MASK_SIZE = 2

# NBT list names for the tile entity and entity blocks
TILE_ENTITIES_TAG = "tiles"
ENTITIES_TAG = "entities"

# zstd
DEFAULT_COMPRESSION_LEVEL = 3
MIN_COMPRESSION_LEVEL = 1
MAX_COMPRESSION_LEVEL = 22
