"""
Intcode Machine - Main Machine Class

Top-level class that ties together:
  - Memory tape (mem/tape.py)
  - Instruction decoder + opcode table (cpu/decoder.py)
  - Word arithmetic (cpu/alu.py)
  - Input / output ports (periph/ports.py)

Execution model, one cycle per step():
  1. Decode the instruction at pc (opcode, modes, operands)
  2. Look up the handler for its mnemonic and run it
  3. Advance pc by the instruction width, or jump to the pc the handler
     returned
  4. Stop on HALT (HALTED) or on any fault (FAULTED)

States:
  RUNNING  initial state, pc = 0
  HALTED   HALT executed; run() on a halted machine returns immediately
  FAULTED  a fault was raised; further run()/step() re-raise that fault

Writes made before a fault stay on the tape. Nothing is rolled back.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from .cpu import alu
from .cpu.decoder import (
    DEFAULT_INSTRUCTION_SET, Instruction, InstructionSet, decode_instruction,
)
from .errors import InvalidOpcode, MachineFault
from .mem.tape import Tape
from .periph.ports import (
    InputPort, OutputPort, call_input, call_output, discard_output, no_input,
)

logger = logging.getLogger(__name__)

# Handler signature: handler(ins) -> None (fall through) or new pc
Handler = Callable[[Instruction], Optional[int]]


class MachineState(Enum):
    RUNNING = 'RUNNING'
    HALTED = 'HALTED'
    FAULTED = 'FAULTED'


class Machine:
    """Stored-program integer machine.

    Usage:
        out = CollectOutput()
        m = Machine([3, 0, 4, 0, 99], QueueInput([7]), out)
        m.run()
        out.values        # [7]
        m.dump_memory()   # "[7, 0, 4, 0, 99]"

    The tape is copied at construction and not validated; a malformed
    program only faults when the bad cell is executed.
    """

    def __init__(self, initial_tape: Iterable[int],
                 input_port: InputPort = no_input,
                 output_port: OutputPort = discard_output,
                 instruction_set: InstructionSet = DEFAULT_INSTRUCTION_SET):
        self.tape = Tape(initial_tape)
        self.input_port = input_port
        self.output_port = output_port
        self.instruction_set = instruction_set

        self._pc = 0
        self._state = MachineState.RUNNING
        self._fault: Optional[MachineFault] = None
        self._steps = 0

        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch: Dict[str, Handler] = self._build_dispatch()

    # ══════════════════════════════════════════════
    # State
    # ══════════════════════════════════════════════

    @property
    def pc(self) -> int:
        return self._pc

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def fault(self) -> Optional[MachineFault]:
        """The fault that stopped the machine, if any."""
        return self._fault

    @property
    def steps(self) -> int:
        """Instructions executed so far."""
        return self._steps

    @property
    def halted(self) -> bool:
        return self._state is MachineState.HALTED

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> MachineState:
        """Execute one instruction and return the resulting state."""
        if self._state is MachineState.HALTED:
            return self._state
        if self._state is MachineState.FAULTED:
            raise self._fault

        pc = self._pc
        try:
            ins = decode_instruction(self.tape, pc, self.instruction_set)
            handler = self._dispatch.get(ins.mnemonic)
            if handler is None:
                raise InvalidOpcode(ins.opcode.code, pc,
                                    f"no handler for {ins.mnemonic}")
            if self._trace:
                self._trace_output.append(str(ins))
            logger.debug("%s", ins)
            next_pc = handler(ins)
        except MachineFault as fault:
            # handler-side writes go straight to the tape and carry no pc
            if fault.pc is None:
                fault.pc = pc
            self._state = MachineState.FAULTED
            self._fault = fault
            logger.warning("Machine faulted after %d steps: %s", self._steps, fault)
            raise

        self._steps += 1
        self._pc = ins.next_pc if next_pc is None else next_pc
        return self._state

    def run(self):
        """Run until HALT. Faults propagate to the caller.

        There is no step limit: a program that never halts never returns.
        """
        if self._state is MachineState.HALTED:
            logger.debug("run() on halted machine at pc=%d, nothing to do", self._pc)
            return
        while self.step() is MachineState.RUNNING:
            pass
        logger.info("Halted at pc=%d after %d steps", self._pc, self._steps)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> Dict[str, Handler]:
        """Mnemonic -> handler table.

        Subclasses extend this together with an InstructionSet that
        registers the matching opcodes.
        """
        return {
            'ADD':  self._op_add,
            'MUL':  self._op_mul,
            'IN':   self._op_in,
            'OUT':  self._op_out,
            'HALT': self._op_halt,
        }

    def _op_add(self, ins: Instruction):
        a, b, dest = ins.operands
        self.tape.write(dest, alu.add(a, b))

    def _op_mul(self, ins: Instruction):
        a, b, dest = ins.operands
        self.tape.write(dest, alu.mul(a, b))

    def _op_in(self, ins: Instruction):
        dest, = ins.operands
        value = call_input(self.input_port, ins.pc)
        self.tape.write(dest, alu.wrap64(value))

    def _op_out(self, ins: Instruction):
        value, = ins.operands
        call_output(self.output_port, value, ins.pc)

    def _op_halt(self, ins: Instruction) -> int:
        self._state = MachineState.HALTED
        return ins.pc

    # ══════════════════════════════════════════════
    # Memory access / diagnostics
    # ══════════════════════════════════════════════

    def poke(self, addr: int, value: int):
        """Patch one tape cell, e.g. to set puzzle inputs before run()."""
        self.tape.write(addr, value)

    def peek(self, addr: int) -> int:
        return self.tape.read(addr)

    def dump_memory(self) -> str:
        """Current tape as "[v0, v1, ...]". Safe to call after a fault."""
        return self.tape.dump()

    def enable_trace(self, enable: bool = True):
        """Record one line per executed instruction."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def __repr__(self):
        return (f"Machine(pc={self._pc}, state={self._state.value}, "
                f"cells={len(self.tape)})")
