"""
Intcode Machine - I/O Ports

The machine talks to the outside world through two plain callables
supplied at construction:

  input port   ()      -> int    called once per IN instruction
  output port  (int)   -> None   called once per OUT instruction

Both are invoked inline during dispatch. The machine keeps no state
across the call and never retries. Whatever the port raises, or an input
value that is not an int, surfaces as PortFailure.

Buffering policy belongs to whoever builds the port. QueueInput and
CollectOutput cover the common puzzle case: a fixed list of inputs and a
list collecting everything the program printed.

    out = CollectOutput()
    m = Machine(program, QueueInput([5]), out)
    m.run()
    print(out.values)
"""

import logging
from collections import deque
from typing import Iterable, List, Protocol

from ..errors import PortFailure

logger = logging.getLogger(__name__)


class InputPort(Protocol):
    def __call__(self) -> int: ...


class OutputPort(Protocol):
    def __call__(self, value: int) -> None: ...


# ══════════════════════════════════════════════
# Stock ports
# ══════════════════════════════════════════════

def no_input() -> int:
    """Input port for programs that never read. Refuses every request."""
    raise PortFailure('input', 'no input source connected')


def discard_output(value: int):
    """Output port that drops every value."""
    logger.debug("discarded output %d", value)


class QueueInput:
    """Feed a fixed sequence of integers, one per call."""

    def __init__(self, values: Iterable[int] = ()):
        self._queue = deque(values)

    def push(self, value: int):
        self._queue.append(value)

    def __len__(self) -> int:
        return len(self._queue)

    def __call__(self) -> int:
        if not self._queue:
            raise PortFailure('input', 'input queue exhausted')
        return self._queue.popleft()


class CollectOutput:
    """Append every emitted value to .values."""

    def __init__(self):
        self.values: List[int] = []

    def __call__(self, value: int):
        self.values.append(value)

    def __len__(self) -> int:
        return len(self.values)


# ══════════════════════════════════════════════
# Invocation helpers used by the engine
# ══════════════════════════════════════════════

def call_input(port: InputPort, pc: int) -> int:
    """Invoke an input port, normalizing every failure to PortFailure."""
    try:
        value = port()
    except PortFailure as e:
        raise PortFailure('input', e.reason, pc) from e
    except Exception as e:
        raise PortFailure('input', f"{type(e).__name__}: {e}", pc) from e

    # bool is an int subclass; a True from a port is almost certainly a bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise PortFailure('input', f"expected int, got {type(value).__name__}", pc)
    return value


def call_output(port: OutputPort, value: int, pc: int):
    """Invoke an output port, normalizing every failure to PortFailure."""
    try:
        port(value)
    except PortFailure as e:
        raise PortFailure('output', e.reason, pc) from e
    except Exception as e:
        raise PortFailure('output', f"{type(e).__name__}: {e}", pc) from e
