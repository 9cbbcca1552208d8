"""
Intcode Machine
===============
A stored-program integer computer: the program is a tape of signed
integers, executed by a fetch-decode-execute loop that talks to the
outside world through two caller-supplied ports.

Layout:
    mem/tape.py       bounds-checked integer tape + "[a, b, c]" dump
    cpu/decoder.py    opcode table, addressing modes, decode_instruction()
    cpu/alu.py        64-bit signed wrap arithmetic
    periph/ports.py   input/output port helpers
    machine.py        Machine: step(), run(), dump_memory()
    loader.py         puzzle text -> list of ints (not used by the core)
    log_setup.py      rich console logging for front ends

    >>> m = Machine([1, 0, 0, 0, 99])
    >>> m.run()
    >>> m.dump_memory()
    '[2, 0, 0, 0, 99]'
"""

__version__ = "0.1.0"

from .errors import MachineFault, InvalidOpcode, MemoryFault, PortFailure
from .mem.tape import Tape
from .cpu.decoder import (
    DEFAULT_INSTRUCTION_SET, Instruction, InstructionSet, Opcode,
    POSITION, READ, WRITE, decode_instruction,
)
from .periph.ports import (
    CollectOutput, InputPort, OutputPort, QueueInput, discard_output, no_input,
)
from .machine import Machine, MachineState
from .loader import load_input_file, load_program, parse_program
