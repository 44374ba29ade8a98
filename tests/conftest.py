"""Shared fixtures: synthesize Anvil chunks and region files in memory."""

import gzip
import io
import struct
import zlib
from pathlib import Path
from typing import Dict, Iterable, Optional

import nbtlib
import numpy as np
import pytest

from slimeimporter.anvil import Chunk, ChunkSection, NibbleArray

SECTOR = 4096


def _byte_array(data: bytes) -> nbtlib.ByteArray:
    return nbtlib.ByteArray(np.frombuffer(bytes(data), dtype=np.int8))


def section_tag(y: int, blocks: Optional[bytes] = None, fill: int = 1, light: int = 0xFF) -> nbtlib.Compound:
    """Build a ``Sections`` entry; blocks default to ``fill`` everywhere."""
    if blocks is None:
        blocks = bytes([fill]) * 4096
    return nbtlib.Compound({
        "Y": nbtlib.Byte(y),
        "Blocks": _byte_array(blocks),
        "Data": _byte_array(bytes(2048)),
        "BlockLight": _byte_array(bytes(2048)),
        "SkyLight": _byte_array(bytes([light]) * 2048),
    })


def level_tag(
    x: int,
    z: int,
    sections: Iterable[nbtlib.Compound] = (),
    tile_entities: Optional[list] = None,
    entities: Optional[list] = None,
    omit: Iterable[str] = (),
) -> nbtlib.Compound:
    """Build a pre-1.13 ``Level`` compound."""
    level = nbtlib.Compound({
        "xPos": nbtlib.Int(x),
        "zPos": nbtlib.Int(z),
        "Biomes": _byte_array(bytes(256)),
        "HeightMap": nbtlib.IntArray([0] * 256),
        "Sections": nbtlib.List[nbtlib.Compound](list(sections)),
    })
    if tile_entities is not None:
        level["TileEntities"] = nbtlib.List[nbtlib.Compound](tile_entities)
    if entities is not None:
        level["Entities"] = nbtlib.List[nbtlib.Compound](entities)
    for name in omit:
        del level[name]
    return level


def nbt_bytes(root: nbtlib.Compound) -> bytes:
    buf = io.BytesIO()
    nbtlib.File(root).write(buf, byteorder="big")
    return buf.getvalue()


def chunk_entry(level: Optional[nbtlib.Compound], scheme: int = 2, root: Optional[nbtlib.Compound] = None) -> bytes:
    """Length-prefixed, compressed chunk data as stored in a region file."""
    if root is None:
        root = nbtlib.Compound({"Level": level})
    raw = nbt_bytes(root)
    if scheme == 1:
        payload = gzip.compress(raw)
    elif scheme == 2:
        payload = zlib.compress(raw)
    else:
        payload = raw
    return struct.pack(">IB", len(payload) + 1, scheme) + payload


def region_bytes(entries: Dict[int, bytes]) -> bytes:
    """Lay out raw chunk entries after the location and timestamp tables."""
    header = bytearray(SECTOR * 2)
    body = bytearray()
    sector = 2
    for index, entry in sorted(entries.items()):
        sectors = (len(entry) + SECTOR - 1) // SECTOR
        struct.pack_into(">I", header, index * 4, (sector << 8) | sectors)
        body.extend(entry)
        body.extend(bytes(sectors * SECTOR - len(entry)))
        sector += sectors
    return bytes(header) + bytes(body)


def region_of(levels: Dict[int, nbtlib.Compound], scheme: int = 2) -> bytes:
    return region_bytes({index: chunk_entry(level, scheme) for index, level in levels.items()})


def make_chunk(
    x: int,
    z: int,
    section_indexes: Iterable[int] = (0,),
    tile_entities: Optional[list] = None,
    entities: Optional[list] = None,
) -> Chunk:
    sections = [None] * 16
    for i in section_indexes:
        section = ChunkSection(
            blocks=bytes([1]) * 4096,
            data=NibbleArray(4096),
            block_light=NibbleArray(4096),
            sky_light=NibbleArray(4096),
        )
        sections[i] = section
    return Chunk(
        x=x,
        z=z,
        sections=sections,
        height_map=[0] * 256,
        biomes=bytes(256),
        tile_entities=tile_entities or [],
        entities=entities or [],
    )


@pytest.fixture
def make_world(tmp_path):
    """Create ``<tmp>/<name>/region`` with the given region files."""
    def factory(regions: Dict[str, bytes], name: str = "world") -> Path:
        world_dir = tmp_path / name
        region_dir = world_dir / "region"
        region_dir.mkdir(parents=True)
        for filename, data in regions.items():
            (region_dir / filename).write_bytes(data)
        return world_dir
    return factory
