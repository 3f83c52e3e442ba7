from bisect import bisect_left, bisect_right, insort
from sys import stdout
from typing import Any, List, Optional, TextIO, Tuple

from tracemem.core.errors import ByteTrackerError
from tracemem.util.debugging import dbgv


class ByteRange:
    """
    Inclusive range of memory offsets [start, end].
    """

    __slots__ = "start", "end"

    def __init__(self, start: int, end: int) -> None:
        assert start >= 0, f"Negative offset: {start}"
        assert start <= end, f"Empty range: [{start}, {end}]"
        self.start = start
        self.end = end

    @staticmethod
    def of_write(offset: int, size: int) -> "ByteRange":
        """Range of bytes modified by writing `size` bytes to `offset`"""
        return ByteRange(offset, offset + size - 1)

    def size(self) -> int:
        return self.end - self.start + 1

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end

    def collides(self, rhs: "ByteRange") -> bool:
        return self.start <= rhs.end and self.end >= rhs.start

    def covers(self, rhs: "ByteRange") -> bool:
        """True if every byte of `rhs` is in this range"""
        return self.start <= rhs.start and self.end >= rhs.end

    def strictly_inside(self, rhs: "ByteRange") -> bool:
        """True if `rhs` has bytes on both sides of this range"""
        return self.start > rhs.start and self.end < rhs.end

    def __eq__(self, rhs: object) -> bool:
        return (
            isinstance(rhs, ByteRange)
            and self.start == rhs.start
            and self.end == rhs.end
        )

    def __lt__(self, rhs: "ByteRange") -> bool:
        return (self.start, self.end) < (rhs.start, rhs.end)

    def __hash__(self) -> int:
        return hash((self.start, self.end))

    def __repr__(self) -> str:
        return f"[{self.start}, {self.end}]"


class ByteTracker:
    """
    Associates ranges of memory with the (opaque) token of the instruction
    that wrote them last. The tracked ranges are pairwise disjoint, every
    write removes, splits or shortens the ranges it overwrites.

    Ranges are indexed by their start offset. Because they are disjoint,
    sorting them by start sorts them by end too.
    """

    __slots__ = "_starts", "_ranges", "_ro"

    def __init__(self) -> None:
        # sorted start offsets of the tracked ranges
        self._starts = []
        # start offset -> (range, token)
        self._ranges = {}
        self._ro = False  # COW support

    def copy(self) -> "ByteTracker":
        new = ByteTracker()
        new._starts = self._starts
        new._ranges = self._ranges
        new._ro = self._ro = True
        return new

    def _reown(self) -> None:
        if self._ro:
            self._starts = self._starts.copy()
            self._ranges = self._ranges.copy()
            self._ro = False

    def __len__(self) -> int:
        return len(self._starts)

    def __eq__(self, rhs: object) -> bool:
        return isinstance(rhs, ByteTracker) and self.ranges() == rhs.ranges()

    def _entry(self, start: int) -> Tuple[ByteRange, Any]:
        entry = self._ranges.get(start)
        if entry is None:
            raise ByteTrackerError(f"Lost the range starting at offset {start}")
        return entry

    def _insert(self, rng: ByteRange, token: Any) -> None:
        if rng.start in self._ranges:
            raise ByteTrackerError(f"Range {rng} starts at a tracked offset")
        insort(self._starts, rng.start)
        self._ranges[rng.start] = (rng, token)

    def _remove(self, rng: ByteRange) -> None:
        starts = self._starts
        idx = bisect_left(starts, rng.start)
        if idx == len(starts) or starts[idx] != rng.start:
            raise ByteTrackerError(f"Removing untracked range {rng}")
        del starts[idx]
        if self._ranges.pop(rng.start, None) is None:
            raise ByteTrackerError(f"Removing untracked range {rng}")

    def find_range(self, offset: int) -> Optional[ByteRange]:
        """Return the range that contains `offset` or None"""
        idx = bisect_right(self._starts, offset) - 1
        if idx < 0:
            return None
        rng = self._entry(self._starts[idx])[0]
        return rng if rng.contains(offset) else None

    def has_offset(self, offset: int) -> bool:
        return self.find_range(offset) is not None

    def get_by_offset(self, offset: int) -> Optional[Any]:
        """
        Return the token of the write that last modified the byte at
        `offset`, or None if the byte was never written (by a tracked write).
        """
        rng = self.find_range(offset)
        if rng is None:
            return None
        found, token = self._entry(rng.start)
        if found != rng:
            raise ByteTrackerError(
                f"Range {rng} containing offset {offset} vanished (found {found})"
            )
        return token

    def affected_ranges(self, incoming: ByteRange) -> List[ByteRange]:
        """Tracked ranges that share at least one byte with `incoming`"""
        starts = self._starts
        affected = []
        idx = bisect_right(starts, incoming.end) - 1
        while idx >= 0:
            rng = self._entry(starts[idx])[0]
            if rng.end < incoming.start:
                break
            affected.append(rng)
            idx -= 1
        affected.reverse()
        return affected

    def write(self, offset: int, size: int, token: Any) -> None:
        """
        Associate `token` with the bytes [offset, offset + size - 1].
        The ranges that collide with the new one are

          - deleted if the new range overwrites them completely,
          - split if the new range lies strictly inside them,
          - shortened if the new range overwrites just one of their ends.

        The parts that survive keep their original token.
        """
        if size <= 0:
            return

        incoming = ByteRange.of_write(offset, size)
        self._reown()

        for incumbent in self.affected_ranges(incoming):
            old_token = self._entry(incumbent.start)[1]
            self._remove(incumbent)
            if incoming.covers(incumbent):
                dbgv(f"bytes: {incoming} overwrites {incumbent}")
            elif incoming.strictly_inside(incumbent):
                left = ByteRange(incumbent.start, incoming.start - 1)
                right = ByteRange(incoming.end + 1, incumbent.end)
                dbgv(f"bytes: {incoming} splits {incumbent} to {left} and {right}")
                self._insert(left, old_token)
                self._insert(right, old_token)
            else:
                if incumbent.start < incoming.start:
                    rest = ByteRange(incumbent.start, incoming.start - 1)
                else:
                    rest = ByteRange(incoming.end + 1, incumbent.end)
                dbgv(f"bytes: {incoming} shortens {incumbent} to {rest}")
                self._insert(rest, old_token)

        self._insert(incoming, token)

    def ranges(self) -> List[Tuple[ByteRange, Any]]:
        """Tracked ranges and their tokens ordered by offset"""
        return [self._entry(start) for start in self._starts]

    def verify(self) -> None:
        """
        Check that the tracked ranges are disjoint and that the index is
        consistent. Raise ByteTrackerError if not.
        """
        if len(self._starts) != len(self._ranges):
            raise ByteTrackerError(
                f"Index of {len(self._starts)} starts does not match "
                f"{len(self._ranges)} ranges"
            )
        prev = None
        for start in self._starts:
            rng = self._entry(start)[0]
            if rng.start != start:
                raise ByteTrackerError(f"Range {rng} indexed by offset {start}")
            if prev is not None and prev.end >= rng.start:
                raise ByteTrackerError(f"Ranges {prev} and {rng} overlap")
            prev = rng

    def __repr__(self) -> str:
        return "\n".join(f"{rng} -> {token}" for rng, token in self.ranges())

    def dump(self, stream: TextIO = stdout) -> None:
        for rng, token in self.ranges():
            stream.write(f"{rng} -> {token}\n")
