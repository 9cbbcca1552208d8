"""
Intcode Machine - Instruction Decoder / Opcode Table

An instruction occupies 1 + N cells. The first cell packs the opcode and
the addressing mode of each parameter as decimal digits:

    ABCDE
    1002      DE = opcode (cell % 100)
               C = mode of parameter 1
               B = mode of parameter 2
               A = mode of parameter 3 (leading zeros omitted)

Each parameter is either read (its value is used) or write (it names the
destination cell and is never dereferenced).

Addressing modes:
  POSITION (0)  parameter is an address; read parameters take the value
                stored there, write parameters write there.

Only position mode is registered by default. Further modes (immediate,
relative) are added per InstructionSet with register_mode(); the engine
loop does not change.

decode_instruction() is a pure function of (tape, pc): it reads cells and
validates every address it resolves, but never writes.
"""

from typing import Callable, Dict, NamedTuple, Optional, Tuple

from ..errors import InvalidOpcode, MemoryFault


# ──────────────────────────────────────────────
# Parameter kinds / addressing modes
# ──────────────────────────────────────────────

READ = 'r'
WRITE = 'w'

POSITION = 0


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, parameter kinds)

OPCODES = {
    1:  ('ADD',  'rrw'),   # dest = a + b
    2:  ('MUL',  'rrw'),   # dest = a * b
    3:  ('IN',   'w'),     # dest = input port
    4:  ('OUT',  'r'),     # output port <- a
    99: ('HALT', ''),
}


class Opcode(NamedTuple):
    code: int
    mnemonic: str
    params: str

    @property
    def width(self) -> int:
        """Cells occupied by the instruction, opcode cell included."""
        return 1 + len(self.params)


class Instruction(NamedTuple):
    """One decoded instruction.

    operands[i] is the resolved value for a read parameter and the
    validated destination address for a write parameter.
    """
    pc: int
    opcode: Opcode
    modes: Tuple[int, ...]
    raw: Tuple[int, ...]
    operands: Tuple[int, ...]

    @property
    def mnemonic(self) -> str:
        return self.opcode.mnemonic

    @property
    def next_pc(self) -> int:
        return self.pc + self.opcode.width

    def __str__(self):
        params = ' '.join(
            f"{raw}" if mode == POSITION else f"{mode}:{raw}"
            for mode, raw in zip(self.modes, self.raw)
        )
        return f"{self.pc:5d}: {self.mnemonic:5s} {params}".rstrip()


# Resolver signature: resolver(tape, raw, kind) -> value or address
Resolver = Callable[[object, int, str], int]


def resolve_position(tape, raw: int, kind: str) -> int:
    if kind == WRITE:
        return tape.check(raw)
    return tape.read(raw)


# ──────────────────────────────────────────────
# Instruction set
# ──────────────────────────────────────────────

class InstructionSet:
    """Opcode and addressing mode registry used by the decoder.

    Adding an opcode is a local change: register it here, add a handler
    to the machine's dispatch table. Anything not registered decodes as
    InvalidOpcode.
    """

    def __init__(self, opcodes: Optional[Dict[int, tuple]] = None,
                 modes: Optional[Dict[int, Resolver]] = None):
        self._opcodes: Dict[int, Opcode] = {}
        self._modes: Dict[int, Resolver] = {}
        self._frozen = False
        for code, (mnem, params) in (opcodes or {}).items():
            self.register(code, mnem, params)
        if modes is None:
            modes = {POSITION: resolve_position}
        for digit, resolver in modes.items():
            self.register_mode(digit, resolver)

    def register(self, code: int, mnemonic: str, params: str = '') -> Opcode:
        self._check_frozen()
        if not 0 <= code <= 99:
            raise ValueError(f"Opcode {code} does not fit in two digits")
        if code in self._opcodes:
            raise ValueError(f"Opcode {code} already registered "
                             f"as {self._opcodes[code].mnemonic}")
        if any(kind not in (READ, WRITE) for kind in params):
            raise ValueError(f"Bad parameter kinds {params!r} for {mnemonic}")
        op = Opcode(code, mnemonic, params)
        self._opcodes[code] = op
        return op

    def register_mode(self, digit: int, resolver: Resolver):
        self._check_frozen()
        if not 0 <= digit <= 9:
            raise ValueError(f"Mode {digit} is not a single digit")
        if digit in self._modes:
            raise ValueError(f"Addressing mode {digit} already registered")
        self._modes[digit] = resolver

    def freeze(self) -> 'InstructionSet':
        """Reject further registrations. Returns self."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_frozen(self):
        if self._frozen:
            raise ValueError("Instruction set is frozen; register on a copy()")

    def copy(self) -> 'InstructionSet':
        """Unfrozen copy that can be extended independently."""
        clone = InstructionSet(modes={})
        clone._opcodes = dict(self._opcodes)
        clone._modes = dict(self._modes)
        return clone

    def get(self, code: int) -> Optional[Opcode]:
        return self._opcodes.get(code)

    def resolver(self, digit: int) -> Optional[Resolver]:
        return self._modes.get(digit)

    def __contains__(self, code: int) -> bool:
        return code in self._opcodes

    def __len__(self) -> int:
        return len(self._opcodes)


# Shared by every Machine built without an explicit set, so it is frozen
DEFAULT_INSTRUCTION_SET = InstructionSet(OPCODES).freeze()


# ──────────────────────────────────────────────
# Decoding
# ──────────────────────────────────────────────

def split_modes(cell: int, count: int) -> Tuple[int, ...]:
    """Mode digit for each of `count` parameters, lowest digit first."""
    packed = cell // 100
    return tuple(packed // 10 ** i % 10 for i in range(count))


def decode_instruction(tape, pc: int,
                       instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET
                       ) -> Instruction:
    """Fetch and decode the instruction at pc.

    Raises InvalidOpcode for an unknown opcode or mode digit, MemoryFault
    when pc, a parameter cell, or a resolved address is off the tape.
    """
    try:
        cell = tape.read(pc)
    except MemoryFault as e:
        raise MemoryFault(e.address, e.size, pc) from None

    # -1 % 100 == 99 would decode as HALT; reject negatives outright
    if cell < 0:
        raise InvalidOpcode(cell, pc, "negative instruction cell")

    code = cell % 100
    op = instruction_set.get(code)
    if op is None:
        raise InvalidOpcode(code, pc)

    modes = split_modes(cell, len(op.params))
    raw = []
    operands = []
    try:
        for i, (kind, mode) in enumerate(zip(op.params, modes)):
            resolver = instruction_set.resolver(mode)
            if resolver is None:
                raise InvalidOpcode(code, pc,
                                    f"unknown mode {mode} for parameter {i + 1}")
            value = tape.read(pc + 1 + i)
            raw.append(value)
            operands.append(resolver(tape, value, kind))
    except MemoryFault as e:
        raise MemoryFault(e.address, e.size, pc) from None

    return Instruction(pc, op, modes, tuple(raw), tuple(operands))
