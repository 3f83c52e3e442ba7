from copy import copy
from sys import stdout
from typing import Any, Optional, Tuple, TextIO, Union

from tracemem.core.bytetracker import ByteTracker
from tracemem.util.debugging import dbgv

# memory grows by words
WORD_SIZE = 32
# linear gas cost of one word of memory
MEMORY_GAS = 3
# divisor of the quadratic part of the memory cost
QUAD_COEFF_DIV = 512
# offsets and sizes of stores and reads are capped to this value
MEMORY_CEILING = 65536


def words_of(size: int) -> int:
    return (size + WORD_SIZE - 1) // WORD_SIZE


def memory_cost_of(size: int) -> int:
    """Gas cost of memory that has `size` bytes"""
    words = words_of(size)
    return words * words // QUAD_COEFF_DIV + MEMORY_GAS * words


class Memory:
    """
    Linear memory of one execution. Apart from the bytes, it keeps
    a ByteTracker that remembers which write modified each byte last
    (only writes done via `store_with_opcode` are tracked).

    Copies are copy-on-write: the buffer and the tracker are shared
    until one of the memories is modified.
    """

    __slots__ = "_data", "_data_ro", "_bytes", "_ceiling"

    def __init__(self, ceiling: int = MEMORY_CEILING) -> None:
        self._data = bytearray()
        self._data_ro = False
        self._bytes = ByteTracker()
        self._ceiling = ceiling

    def copy(self) -> "Memory":
        new = copy(self)
        new._data_ro = self._data_ro = True
        new._bytes = self._bytes.copy()
        return new

    def _data_reown(self) -> None:
        if self._data_ro:
            self._data = bytearray(self._data)
            self._data_ro = False

    def __eq__(self, rhs: object) -> bool:
        return (
            isinstance(rhs, Memory)
            and self._data == rhs._data
            and self._bytes == rhs._bytes
        )

    def size(self) -> int:
        """Size of the memory in bytes"""
        return len(self._data)

    def ceiling(self) -> int:
        return self._ceiling

    def tracker(self) -> ByteTracker:
        return self._bytes

    def _clamp(self, offset: int, size: int) -> Tuple[int, int]:
        ceiling = self._ceiling
        if offset > ceiling or size > ceiling:
            dbgv(f"memory: clamping access of {size}B at {offset} to {ceiling}")
            return min(offset, ceiling), min(size, ceiling)
        return offset, size

    def extend(self, offset: int, size: int) -> None:
        """
        Make the memory big enough to hold `size` bytes at `offset`.
        The size of the memory is always a multiple of the word size.
        """
        new_size = words_of(offset + size) * WORD_SIZE
        cur_size = len(self._data)
        if new_size > cur_size:
            dbgv(f"memory: extending from {cur_size}B to {new_size}B")
            self._data_reown()
            self._data.extend(bytes(new_size - cur_size))

    def store(self, offset: int, size: int, value: Union[bytes, bytearray, list]) -> None:
        """
        Write `size` bytes of `value` to `offset`. A longer value is
        truncated to its first `size` bytes, a shorter value is padded
        by zero bytes from the left (i.e., it is stored big-endian).
        """
        offset, size = self._clamp(offset, size)
        value = bytes(value)
        if len(value) >= size:
            value = value[:size]
        else:
            value = bytes(size - len(value)) + value

        self.extend(offset, size)
        self._data_reown()
        self._data[offset : offset + size] = value

    def store8(self, offset: int, value: int) -> None:
        self.store(offset, 1, bytes([value & 0xFF]))

    def store_with_opcode(
        self, offset: int, size: int, value: Union[bytes, bytearray, list], token: Any
    ) -> None:
        """
        Like `store`, but remember that `token` modified the stored bytes.
        """
        offset, size = self._clamp(offset, size)
        self.store(offset, size, value)
        self._bytes.write(offset, size, token)

    def read(self, offset: int, size: int) -> bytes:
        """
        Read `size` bytes from `offset`. Bytes beyond the end of the memory
        read as zeros, the memory is not extended.
        """
        offset, size = self._clamp(offset, size)
        chunk = self._data[offset : offset + size]
        return bytes(chunk) + bytes(size - len(chunk))

    def memory_cost(self) -> int:
        """Gas cost of the current memory"""
        return memory_cost_of(len(self._data))

    def expansion_cost(self, offset: int, size: int) -> int:
        """
        Gas needed to extend the memory so that it holds `size` bytes
        at `offset`. Zero if the memory is already big enough.
        """
        new_cost = memory_cost_of(offset + size)
        cur_cost = self.memory_cost()
        if new_cost < cur_cost:
            return 0
        return new_cost - cur_cost

    def origin(self, byte: int) -> Optional[Any]:
        """
        Return the token of the tracked write that modified the byte
        at the given offset last, or None if there is no such write.
        """
        return self._bytes.get_by_offset(byte)

    def __repr__(self) -> str:
        return f"Memory({len(self._data)}B, {len(self._bytes)} tracked ranges)"

    def dump(self, stream: TextIO = stdout) -> None:
        data = self._data
        stream.write(f"-- Memory ({len(data)}B):\n")
        for off in range(0, len(data), WORD_SIZE):
            stream.write(f"{off:#06x}: {data[off : off + WORD_SIZE].hex()}\n")
        stream.write("-- Tracked bytes:\n")
        self._bytes.dump(stream)
