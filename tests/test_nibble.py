import pytest

from slimeimporter.anvil import NibbleArray


@pytest.mark.parametrize("size", [0, 1, 2, 7, 4096])
def test_backing_length_is_half_rounded_up(size):
    assert len(NibbleArray(size).backing) == (size + 1) // 2
    assert len(NibbleArray(size)) == size


def test_set_then_get_does_not_touch_neighbours():
    array = NibbleArray(4096)
    for i, value in [(0, 15), (1, 7), (2, 1), (4095, 9)]:
        array.set(i, value)
    assert array.get(0) == 15
    assert array.get(1) == 7
    assert array.get(2) == 1
    assert array.get(3) == 0
    assert array.get(4094) == 0
    assert array.get(4095) == 9


def test_low_nibble_first():
    array = NibbleArray(2)
    array[0] = 0x3
    array[1] = 0xA
    assert array.backing == bytes([0xA3])


def test_every_value_round_trips():
    array = NibbleArray(33)
    for value in range(16):
        array[value * 2] = value
        assert array[value * 2] == value
    array[32] = 5
    assert array[32] == 5
    assert array[31] == 0


def test_from_backing_wraps_bytes():
    array = NibbleArray.from_backing(bytes([0x21, 0x43]))
    assert len(array) == 4
    assert [array[i] for i in range(4)] == [1, 2, 3, 4]


def test_backing_is_a_copy():
    array = NibbleArray(4)
    snapshot = array.backing
    array[0] = 1
    assert snapshot == bytes(2)


def test_rejects_out_of_range_values():
    array = NibbleArray(4)
    with pytest.raises(ValueError):
        array.set(0, 16)
    with pytest.raises(ValueError):
        array.set(0, -1)
    with pytest.raises(IndexError):
        array.get(4)
    with pytest.raises(ValueError):
        NibbleArray(-1)
