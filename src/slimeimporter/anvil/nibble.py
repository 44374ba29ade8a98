"""Packed 4-bit arrays used for block metadata and light values.

Two entries share each backing byte, low nibble first: entry ``2n`` lives
in bits 0-3 of byte ``n`` and entry ``2n + 1`` in bits 4-7.
"""

from typing import Union


class NibbleArray:
    """Fixed-size array of 4-bit unsigned values.

    Attributes:
        size: Number of logical entries
    """

    __slots__ = ("size", "_backing")

    def __init__(self, size: int):
        if size < 0:
            raise ValueError(f"NibbleArray size must be >= 0: {size}")
        self.size = size
        self._backing = bytearray((size + 1) // 2)

    @classmethod
    def from_backing(cls, backing: Union[bytes, bytearray, memoryview]) -> "NibbleArray":
        """Wrap an existing backing buffer (two entries per byte)."""
        array = cls(0)
        array._backing = bytearray(backing)
        array.size = len(array._backing) * 2
        return array

    def __len__(self) -> int:
        return self.size

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise IndexError(f"NibbleArray index out of range: {index} (size {self.size})")

    def get(self, index: int) -> int:
        """Get 4-bit value at index."""
        self._check_index(index)
        value = self._backing[index >> 1]
        if index & 1 == 0:
            return value & 0x0F
        return (value >> 4) & 0x0F

    def set(self, index: int, value: int) -> None:
        """Set 4-bit value at index."""
        self._check_index(index)
        if not 0 <= value <= 0x0F:
            raise ValueError(f"Nibble value must be 0-15: {value}")
        byte_idx = index >> 1
        if index & 1 == 0:
            self._backing[byte_idx] = (self._backing[byte_idx] & 0xF0) | value
        else:
            self._backing[byte_idx] = (self._backing[byte_idx] & 0x0F) | (value << 4)

    __getitem__ = get
    __setitem__ = set

    @property
    def backing(self) -> bytes:
        """Copy of the packed backing bytes."""
        return bytes(self._backing)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NibbleArray):
            return NotImplemented
        return self.size == other.size and self._backing == other._backing

    def __repr__(self) -> str:
        return f"NibbleArray(size={self.size})"
