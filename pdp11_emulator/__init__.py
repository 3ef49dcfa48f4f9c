"""
PDP-11 Subset Emulator
======================
Runs PDP-11 machine code, loaded as octal words, against a simulated
register file and 16K-word memory, and reports the final state plus
execution statistics.

Supported: MOV, CMP, ADD, SUB, ASL, ASR, BR, BEQ, BNE, SOB, HALT, with
all eight addressing modes.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌──────────┐
    │ loader   │───>│ Memory   │<──>│ PDP11     │───>│ trace    │
    │ (octal)  │    │ Registers│    │ Emulator  │    │ (text)   │
    └──────────┘    └──────────┘    └───────────┘    └──────────┘
                                     decoder / addressing / alu

    - cpu/decoder.py:    three-layout instruction decoder
    - cpu/addressing.py: the eight addressing modes
    - cpu/alu.py:        results + N/Z/V/C flags
    - emu.py:            fetch/decode/execute loop, StepRecords
    - trace.py:          trace, statistics and memory dump text
"""

__version__ = "0.1.0"

from .errors import EmulatorError, InvalidOpcode, AddressRangeViolation, MemoryFault
from .cpu.decoder import AddressMode, Opcode, Instruction, decode
from .cpu.addressing import OperandPhrase, resolve_operand
from .cpu.regs import Registers
from .mem.memory import Memory
from .stats import Statistics
from .emu import PDP11Emulator, StopReason, MachineState, StepRecord
from .loader import LoaderError, parse_octal_words, load_program


def run_program(source: str, *, memory_words: int = 16 * 1024) -> PDP11Emulator:
    """Load an octal program image and run it to completion.

    Returns the emulator so callers can inspect registers, memory,
    statistics and `stop_reason`.
    """
    emu = PDP11Emulator(memory_words)
    load_program(emu.mem, source)
    emu.run()
    return emu
