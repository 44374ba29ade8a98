import nbtlib
import pytest

from slimeimporter.anvil import ChunkSection, decode_level, is_empty_section
from slimeimporter.errors import MalformedChunkData

from conftest import level_tag, section_tag


class TestIsEmptySection:

    def test_all_zero_is_empty(self):
        assert is_empty_section(bytes(4096))

    @pytest.mark.parametrize("position", [0, 1, 2047, 4095])
    def test_single_non_zero_byte_is_not_empty(self, position):
        blocks = bytearray(4096)
        blocks[position] = 0x80
        assert not is_empty_section(bytes(blocks))


class TestDecodeLevel:

    def test_all_empty_sections_decode_to_none(self):
        level = level_tag(0, 0, [section_tag(y, fill=0) for y in range(16)])
        assert decode_level(level) is None

    def test_no_sections_decodes_to_none(self):
        assert decode_level(level_tag(0, 0, [])) is None

    def test_single_non_empty_section(self):
        level = level_tag(3, -4, [section_tag(0, fill=0), section_tag(5, fill=2)])
        chunk = decode_level(level)

        assert chunk is not None
        assert (chunk.x, chunk.z) == (3, -4)
        assert chunk.sections[5] is not None
        assert all(section is None for i, section in enumerate(chunk.sections) if i != 5)
        assert chunk.section_mask() == 1 << 5
        assert chunk.sections[5].get_block(15, 15, 15) == 2

    def test_section_arrays_are_carried_through(self):
        blocks = bytearray(4096)
        blocks[0x123] = 0xFE
        level = level_tag(0, 0, [section_tag(2, blocks=bytes(blocks), light=0x5A)])
        section = decode_level(level).sections[2]

        assert isinstance(section, ChunkSection)
        assert section.blocks == bytes(blocks)
        assert section.sky_light.backing == bytes([0x5A]) * 2048
        assert section.block_light.backing == bytes(2048)
        assert section.sky_light.get(0) == 0xA
        assert section.sky_light.get(1) == 0x5

    def test_biomes_and_height_map_are_kept(self):
        level = level_tag(0, 0, [section_tag(0)])
        level["Biomes"] = nbtlib.ByteArray([i % 128 for i in range(256)])
        level["HeightMap"] = nbtlib.IntArray(list(range(256)))
        chunk = decode_level(level)

        assert chunk.biomes == bytes(i % 128 for i in range(256))
        assert chunk.height_map == list(range(256))

    def test_negative_biome_bytes_survive(self):
        level = level_tag(0, 0, [section_tag(0)])
        level["Biomes"] = nbtlib.ByteArray([-1] * 256)
        assert decode_level(level).biomes == b"\xff" * 256

    @pytest.mark.parametrize("field", ["xPos", "zPos", "Biomes", "HeightMap", "Sections"])
    def test_missing_required_field_is_skipped(self, field):
        level = level_tag(0, 0, [section_tag(0)], omit=[field])
        assert decode_level(level) is None

    def test_newer_biome_layout_is_skipped(self):
        level = level_tag(0, 0, [section_tag(0)])
        level["Biomes"] = nbtlib.IntArray([0] * 1024)
        assert decode_level(level) is None

    def test_entities_default_to_empty(self):
        chunk = decode_level(level_tag(0, 0, [section_tag(0)]))
        assert chunk.tile_entities == []
        assert chunk.entities == []

    def test_entities_are_carried_verbatim(self):
        sign = nbtlib.Compound({"id": nbtlib.String("Sign"), "x": nbtlib.Int(1)})
        pig = nbtlib.Compound({"id": nbtlib.String("Pig"), "Health": nbtlib.Float(10.0)})
        chunk = decode_level(level_tag(0, 0, [section_tag(0)], tile_entities=[sign], entities=[pig]))

        assert chunk.tile_entities == [sign]
        assert chunk.entities == [pig]

    @pytest.mark.parametrize("y", [-1, 16, 100])
    def test_out_of_range_section_y_is_malformed(self, y):
        with pytest.raises(MalformedChunkData):
            decode_level(level_tag(0, 0, [section_tag(y)]), index=7)

    def test_empty_section_with_bad_y_is_ignored(self):
        level = level_tag(0, 0, [section_tag(-1, fill=0), section_tag(1)])
        assert decode_level(level).section_mask() == 0b10

    def test_section_missing_light_is_malformed(self):
        tag = section_tag(0)
        del tag["SkyLight"]
        with pytest.raises(MalformedChunkData, match="SkyLight"):
            decode_level(level_tag(0, 0, [tag]))

    def test_wrong_block_array_length_is_malformed(self):
        tag = section_tag(0)
        tag["Blocks"] = nbtlib.ByteArray([1] * 100)
        with pytest.raises(MalformedChunkData):
            decode_level(level_tag(0, 0, [tag]))

    def test_wrong_height_map_length_is_malformed(self):
        level = level_tag(0, 0, [section_tag(0)])
        level["HeightMap"] = nbtlib.IntArray([0] * 10)
        with pytest.raises(MalformedChunkData, match="HeightMap"):
            decode_level(level)

    def test_error_names_the_slot(self):
        with pytest.raises(MalformedChunkData, match="chunk slot 42"):
            decode_level(level_tag(0, 0, [section_tag(99)]), index=42)
