"""
Intcode Machine - Fault Types

Every fault raised while a program runs derives from MachineFault, so a
caller can catch the whole family with one except clause:

  MachineFault
    InvalidOpcode   opcode / mode digit not in the instruction set
    MemoryFault     address outside [0, len(tape))
    PortFailure     input or output port raised or refused a value

Faults are terminal. The engine does not roll back writes made by earlier
cycles; the tape keeps whatever those cycles left behind.
"""

from typing import Optional


class MachineFault(Exception):
    """Base class for faults that stop the run loop."""

    def __init__(self, message: str, pc: Optional[int] = None):
        super().__init__(message)
        self.pc = pc


class InvalidOpcode(MachineFault):
    """Raised when the cell at pc is not a supported instruction."""

    def __init__(self, opcode: int, pc: Optional[int] = None,
                 detail: Optional[str] = None):
        self.opcode = opcode
        message = f"Unknown opcode {opcode}"
        if pc is not None:
            message += f" at pc={pc}"
        if detail:
            message += f" ({detail})"
        super().__init__(message, pc)


class MemoryFault(MachineFault):
    """Raised on a read or write outside the tape."""

    def __init__(self, address: int, size: int, pc: Optional[int] = None):
        self.address = address
        self.size = size
        message = f"Address {address} out of range [0, {size})"
        if pc is not None:
            message += f" at pc={pc}"
        super().__init__(message, pc)


class PortFailure(MachineFault):
    """Raised when a caller-supplied port fails.

    The original exception, if any, is chained as __cause__.
    """

    def __init__(self, port: str, reason: str, pc: Optional[int] = None):
        self.port = port
        self.reason = reason
        message = f"{port} port failed: {reason}"
        if pc is not None:
            message += f" at pc={pc}"
        super().__init__(message, pc)
