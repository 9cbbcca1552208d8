"""
Intcode Machine - Memory Tape

A flat, zero-indexed list of signed integers. Code and data share the
same cells; what a cell means depends only on where the program counter
points when it is read.

The tape never grows and never wraps. Any index outside [0, len) raises
MemoryFault, including negative indices (Python's list[-1] would
otherwise read the last cell).
"""

from typing import Iterable, Iterator, List, Tuple

from ..errors import MemoryFault


class Tape:
    """Fixed-length integer memory with bounds-checked access."""

    def __init__(self, values: Iterable[int] = ()):
        self._cells: List[int] = list(values)

    # --- Core read/write ---

    def check(self, addr: int) -> int:
        """Validate an address, returning it unchanged."""
        if not 0 <= addr < len(self._cells):
            raise MemoryFault(addr, len(self._cells))
        return addr

    def read(self, addr: int) -> int:
        return self._cells[self.check(addr)]

    def write(self, addr: int, value: int):
        self._cells[self.check(addr)] = value

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __setitem__(self, addr: int, value: int):
        self.write(addr, value)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[int]:
        return iter(self._cells)

    def __repr__(self) -> str:
        return f"Tape({self.dump()})"

    # --- Snapshot / dump ---

    def snapshot(self) -> Tuple[int, ...]:
        """Immutable copy of every cell, for diffing in tests."""
        return tuple(self._cells)

    def dump(self) -> str:
        """Render the tape as "[v0, v1, ..., vn]".

        Test oracles compare this string literally; keep the separator
        and brackets exactly as they are.
        """
        return '[' + ', '.join(str(v) for v in self._cells) + ']'
