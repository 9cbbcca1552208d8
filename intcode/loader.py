"""
Intcode Machine - Puzzle Input Loader

Sits outside the machine: it turns puzzle text into the list of integers
the Machine constructor takes. The machine itself never reads files.

Puzzle inputs are looked up in ./inputs relative to the working
directory (run from the repository root), unless base_dir says otherwise:

    rom = load_input_file('day02.txt', parse_program)
    m = Machine(rom)
"""

from pathlib import Path
from typing import Callable, List, TypeVar, Union

T = TypeVar('T')

# Resolved against the working directory at call time
INPUT_DIR = Path("inputs")


def parse_program(text: str) -> List[int]:
    """Parse comma-separated signed integers.

    Whitespace around fields and empty fields (trailing comma, trailing
    newline) are ignored.
    """
    program = []
    for index, field in enumerate(text.split(',')):
        field = field.strip()
        if not field:
            continue
        try:
            program.append(int(field))
        except ValueError:
            raise ValueError(
                f"Field {index} is not an integer: {field!r}") from None
    return program


def load_input_file(name: str, parser: Callable[[str], T],
                    base_dir: Union[str, Path] = INPUT_DIR) -> T:
    """Read <base_dir>/<name> and hand its text to parser."""
    path = Path(base_dir) / name
    return parser(path.read_text(encoding='utf-8'))


def load_program(path: Union[str, Path]) -> List[int]:
    """Read a program file and parse it."""
    return parse_program(Path(path).read_text(encoding='utf-8'))
