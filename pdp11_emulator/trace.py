"""
PDP-11 Emulator — Trace, Statistics and Memory Dump Rendering

The emulator core publishes a StepRecord per instruction and never
formats anything itself. This module turns those records, the final
Statistics and the memory contents into the simulator's text output.

Output modes:
  OFF      — statistics only
  TRACE    — one line per instruction ("at 0PPPP, mov instruction ...")
  VERBOSE  — trace plus operand values, results, nzvc bits, a register
             dump after every instruction, the loaded image echo and a
             post-halt dump of the first words of memory
"""

import sys
from enum import Enum
from typing import Iterable, List, Optional, Sequence, TextIO

from .cpu.decoder import Opcode
from .emu import StepRecord
from .errors import (AddressRangeViolation, EmulatorError, InvalidOpcode,
                     MemoryFault)
from .stats import Statistics


class TraceMode(Enum):
    OFF = 'off'
    TRACE = 'trace'
    VERBOSE = 'verbose'


DOUBLE_OPERAND = (Opcode.MOV, Opcode.CMP, Opcode.ADD, Opcode.SUB)
SHIFTS = (Opcode.ASL, Opcode.ASR)
SHOWS_SRC = DOUBLE_OPERAND
SHOWS_DST = (Opcode.CMP, Opcode.ADD, Opcode.SUB) + SHIFTS
SHOWS_RESULT = SHOWS_DST
SHOWS_FLAGS = DOUBLE_OPERAND + SHIFTS


# ══════════════════════════════════════════════
# Line formatting
# ══════════════════════════════════════════════

def describe_instruction(rec: StepRecord) -> str:
    """The trace line for an executed instruction, without the address."""
    instr = rec.instruction
    op = instr.opcode
    name = op.value.lower()
    if op is Opcode.HALT:
        return "halt instruction"
    if op in DOUBLE_OPERAND:
        return (f"{name} instruction sm {int(instr.src_mode)}, sr {instr.src_reg} "
                f"dm {int(instr.dst_mode)} dr {instr.dst_reg}")
    if op in SHIFTS:
        return f"{name} instruction dm {int(instr.dst_mode)} dr {instr.dst_reg}"
    if op is Opcode.SOB:
        return f"sob instruction reg {instr.src_reg} with offset {instr.raw_offset:03o}"
    return f"{name} instruction with offset {instr.raw_offset:04o}"


def format_registers(registers: Sequence[int]) -> List[str]:
    """Two-row register dump, even registers on the first row."""
    return [
        "  " + "  ".join(f"R{i}:0{registers[i]:06o}" for i in (0, 2, 4, 6)),
        "  " + "  ".join(f"R{i}:0{registers[i]:06o}" for i in (1, 3, 5, 7)),
    ]


def format_verbose_details(rec: StepRecord) -> List[str]:
    """Operand, result and flag lines for one record (verbose mode)."""
    op = rec.opcode
    lines = []
    if op in SHOWS_SRC:
        lines.append(f"  src.value = 0{rec.src.value:06o}")
    if op in SHOWS_DST:
        lines.append(f"  dst.value = 0{rec.dst.value:06o}")
    if op in SHOWS_RESULT:
        lines.append(f"  result    = 0{rec.result:06o}")
    if op in SHOWS_FLAGS:
        n, z, v, c = rec.flags
        lines.append(f"  nzvc bits = 4'b{n}{z}{v}{c}")
    if rec.memory_write is not None:
        addr, value = rec.memory_write
        lines.append(f"  value 0{value:06o} is written to 0{addr:06o}")
    return lines


def render_statistics(stats: Statistics) -> str:
    lines = [
        "execution statistics (in decimal):",
        f"  instructions executed     = {stats.instructions_executed}",
        f"  instruction words fetched = {stats.instruction_words_fetched}",
        f"  data words read           = {stats.data_words_read}",
        f"  data words written        = {stats.data_words_written}",
        f"  branches executed         = {stats.branches_executed}",
    ]
    taken = f"  branches taken            = {stats.branches_taken}"
    percent = stats.branches_taken_percent
    if percent is not None:
        taken += f" ({percent:.1f}%)"
    lines.append(taken)
    return "\n".join(lines)


def render_memory_dump(words: Sequence[int]) -> str:
    lines = [f"first {len(words)} words of memory after execution halts:"]
    for i, word in enumerate(words):
        lines.append(f"  0{i * 2:04o}: {word:06o}")
    return "\n".join(lines)


def render_failure(err: EmulatorError) -> str:
    pc = err.pc if err.pc is not None else 0
    if isinstance(err, InvalidOpcode):
        return f"BAD INSTRUCTION AT PC = {pc:06o}"
    if isinstance(err, AddressRangeViolation):
        return f"ADDRESS RANGE VIOLATION AT PC = {pc:06o} ({err})"
    if isinstance(err, MemoryFault):
        return f"MEMORY FAULT AT PC = {pc:06o} ({err})"
    return f"FAULT AT PC = {pc:06o} ({err})"


# ══════════════════════════════════════════════
# Streaming renderer
# ══════════════════════════════════════════════

class TraceRenderer:
    """Step-record sink that writes trace output to a text stream.

    Register it with PDP11Emulator.add_trace_sink(). With mode OFF it
    accepts records and writes nothing.
    """

    def __init__(self, mode: TraceMode = TraceMode.OFF,
                 out: Optional[TextIO] = None):
        self.mode = mode
        self.out = out if out is not None else sys.stdout

    @property
    def tracing(self) -> bool:
        return self.mode is not TraceMode.OFF

    @property
    def verbose(self) -> bool:
        return self.mode is TraceMode.VERBOSE

    def _write(self, text: str):
        self.out.write(text)

    def _lines(self, lines: Iterable[str]):
        for line in lines:
            self._write(line + "\n")

    def loaded(self, words: Iterable[int], source: str = "stdin"):
        """Echo the loaded image (verbose only)."""
        if self.verbose:
            self._write(f"reading words in octal from {source}:\n")
            self._lines(f"  0{word:06o}" for word in words)

    def begin(self):
        if self.tracing:
            self._write("\ninstruction trace:\n")

    def __call__(self, rec: StepRecord):
        if not self.tracing:
            return
        self._write(f"at 0{rec.pc:04o}, ")
        if rec.fault is not None and rec.instruction is None:
            return
        self._write(describe_instruction(rec) + "\n")
        if self.verbose:
            if rec.fault is None:
                self._lines(format_verbose_details(rec))
            self._lines(format_registers(rec.registers))

    def finish(self, stats: Statistics, memory_words: Sequence[int] = ()):
        """Write the statistics block and, in verbose mode, the memory dump."""
        if self.tracing:
            self._write("\n")
        self._write(render_statistics(stats) + "\n")
        if self.verbose and memory_words:
            self._write("\n" + render_memory_dump(memory_words) + "\n")

    def failure(self, err: EmulatorError):
        self._write("\n" + render_failure(err) + "\n")
