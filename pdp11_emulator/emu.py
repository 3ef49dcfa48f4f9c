"""
PDP-11 Emulator — Main Emulator Class

Integrates:
  - register file + condition codes (cpu/regs.py)
  - word memory (mem/memory.py)
  - instruction decoder (cpu/decoder.py)
  - addressing modes (cpu/addressing.py)
  - condition code computation (cpu/alu.py)
  - execution statistics (stats.py)

Execution model, one step():
  1. Fetch word at PC, advance PC by 2, count the instruction + fetch
  2. Word 0 → HALT
  3. Decode → Instruction (InvalidOpcode if no layout matches)
  4. Handler resolves operands, computes result + flags, performs the
     opcode's single architectural write
  5. Publish a StepRecord to trace sinks

Termination reasons:
  - HALT:           word 0 fetched
  - ILLEGAL:        word matches no decode layout
  - ADDRESS_RANGE:  autoincrement operand outside 16 bits
  - MEMORY_FAULT:   address beyond the allocated memory

Any reason other than HALT leaves the machine FAILED. A stopped machine
does not step again until reset().
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .cpu import alu
from .cpu.addressing import OperandPhrase, resolve_operand
from .cpu.decoder import AddressMode, Instruction, Opcode, decode
from .cpu.regs import Registers
from .errors import (AddressRangeViolation, EmulatorError, InvalidOpcode,
                     MemoryFault)
from .loader import load_program
from .mem.memory import MEMORY_WORDS, Memory
from .stats import Statistics

log = logging.getLogger('pdp11.emu')


class StopReason(Enum):
    HALT = 'HALT'
    ILLEGAL = 'ILLEGAL'
    ADDRESS_RANGE = 'ADDRESS_RANGE'
    MEMORY_FAULT = 'MEMORY_FAULT'


class MachineState(Enum):
    RUNNING = 'RUNNING'
    HALTED = 'HALTED'
    FAILED = 'FAILED'


_FAULT_REASONS = {
    InvalidOpcode: StopReason.ILLEGAL,
    AddressRangeViolation: StopReason.ADDRESS_RANGE,
    MemoryFault: StopReason.MEMORY_FAULT,
}


@dataclass
class StepRecord:
    """Everything a trace sink needs to render one executed instruction.

    Filled in by the handler: only the operands an opcode actually
    resolves are set. `flags` is the (N, Z, V, C) tuple and `registers`
    the R0-R7 snapshot after the instruction. `fault` is set instead of
    the rest when the step failed.
    """
    pc: int
    word: Optional[int] = None
    instruction: Optional[Instruction] = None
    src: Optional[OperandPhrase] = None
    dst: Optional[OperandPhrase] = None
    result: Optional[int] = None
    branch_taken: Optional[bool] = None
    memory_write: Optional[Tuple[int, int]] = None
    flags: Tuple[int, int, int, int] = (0, 0, 0, 0)
    registers: Tuple[int, ...] = ()
    fault: Optional[EmulatorError] = None

    @property
    def opcode(self) -> Optional[Opcode]:
        return self.instruction.opcode if self.instruction else None


TraceSink = Callable[[StepRecord], None]


class PDP11Emulator:
    """PDP-11 subset emulator.

    Usage:
        emu = PDP11Emulator()
        emu.mem.load([0o010001, 0])   # MOV R0,R1; HALT
        reason = emu.run()
        print(emu.regs[1], emu.stats.instructions_executed)
    """

    def __init__(self, memory_words: int = MEMORY_WORDS):
        self.regs = Registers()
        self.mem = Memory(memory_words)
        self.stats = Statistics()

        self.stop_reason: Optional[StopReason] = None
        self.fault: Optional[EmulatorError] = None

        self._sinks: List[TraceSink] = []
        self._trace = False
        self.trace_records: List[StepRecord] = []

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_words(self, words) -> int:
        """Store program words from address 0. Returns the word count."""
        return self.mem.load(words)

    def load_text(self, text: str) -> int:
        """Parse an octal program image and store it from address 0."""
        return load_program(self.mem, text)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    @property
    def state(self) -> MachineState:
        if self.stop_reason is None:
            return MachineState.RUNNING
        if self.stop_reason is StopReason.HALT:
            return MachineState.HALTED
        return MachineState.FAILED

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None."""
        if self.stop_reason is not None:
            return self.stop_reason

        pc = self.regs.PC
        rec = StepRecord(pc=pc)
        try:
            rec.word = self.mem.read(pc)
            self.regs.PC = pc + 2
            self.stats.instructions_executed += 1
            self.stats.instruction_words_fetched += 1

            instr = decode(rec.word)
            rec.instruction = instr
            if instr.opcode is Opcode.HALT:
                self.stop_reason = StopReason.HALT
            else:
                self._dispatch[instr.opcode](instr, rec)
        except EmulatorError as err:
            self._fail(err, pc)
            rec.fault = err

        rec.flags = self.regs.nzvc()
        rec.registers = self.regs.snapshot()
        self._emit(rec)
        return self.stop_reason

    def run(self) -> StopReason:
        """Step until HALT or a fault."""
        log.info("Run started at PC=0%06o", self.regs.PC)
        while True:
            reason = self.step()
            if reason is not None:
                break
        log.info("Run stopped: %s after %d instructions (%s)",
                 reason.value, self.stats.instructions_executed,
                 self.regs.display())
        return reason

    def _fail(self, err: EmulatorError, pc: int):
        if err.pc is None:
            err.pc = pc
        self.fault = err
        self.stop_reason = _FAULT_REASONS.get(type(err), StopReason.ILLEGAL)
        log.info("Fault at PC=0%06o: %s", err.pc, err)

    def _resolve(self, mode: AddressMode, reg: int) -> OperandPhrase:
        return resolve_operand(mode, reg, self.regs, self.mem, self.stats)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr, rec). Each handler fills in the
    # parts of the StepRecord it produces.

    def _build_dispatch(self) -> dict:
        return {
            Opcode.MOV: self._op_mov,
            Opcode.CMP: self._op_cmp,
            Opcode.ADD: self._op_add,
            Opcode.SUB: self._op_sub,
            Opcode.ASL: self._op_asl,
            Opcode.ASR: self._op_asr,
            Opcode.BR:  self._op_br,
            Opcode.BEQ: self._op_beq,
            Opcode.BNE: self._op_bne,
            Opcode.SOB: self._op_sob,
        }

    # ── Double operand ──

    def _op_mov(self, instr, rec):
        """MOV: memory write for autoincrement destinations, else register."""
        src = rec.src = self._resolve(instr.src_mode, instr.src_reg)
        dst = rec.dst = self._resolve(instr.dst_mode, instr.dst_reg)
        rec.result, flags = alu.mov16(src.value)
        self.regs.set_NZV(flags)
        if dst.mode is AddressMode.AUTOINCREMENT:
            self.mem.write(dst.address, src.value)
            self.stats.data_words_written += 1
            rec.memory_write = (dst.address, rec.result)
        else:
            self.regs[dst.reg] = src.value

    def _op_cmp(self, instr, rec):
        src = rec.src = self._resolve(instr.src_mode, instr.src_reg)
        dst = rec.dst = self._resolve(instr.dst_mode, instr.dst_reg)
        rec.result, flags = alu.cmp16(src.value, dst.value)
        self.regs.set_NZVC(flags)

    def _op_add(self, instr, rec):
        src = rec.src = self._resolve(instr.src_mode, instr.src_reg)
        dst = rec.dst = self._resolve(instr.dst_mode, instr.dst_reg)
        rec.result, flags = alu.add16(src.value, dst.value)
        self.regs.set_NZVC(flags)
        self.regs[dst.reg] = rec.result

    def _op_sub(self, instr, rec):
        src = rec.src = self._resolve(instr.src_mode, instr.src_reg)
        dst = rec.dst = self._resolve(instr.dst_mode, instr.dst_reg)
        rec.result, flags = alu.sub16(src.value, dst.value)
        self.regs.set_NZVC(flags)
        self.regs[dst.reg] = rec.result

    # ── Shifts (operate on the destination register) ──

    def _op_asl(self, instr, rec):
        dst = rec.dst = self._resolve(instr.dst_mode, instr.dst_reg)
        rec.result, flags = alu.asl16(self.regs[dst.reg], dst.value)
        self.regs.set_NZVC(flags)
        self.regs[dst.reg] = rec.result

    def _op_asr(self, instr, rec):
        dst = rec.dst = self._resolve(instr.dst_mode, instr.dst_reg)
        rec.result, flags = alu.asr16(self.regs[dst.reg], dst.value)
        self.regs.set_NZVC(flags)
        self.regs[dst.reg] = rec.result

    # ── Branches ──

    def _branch(self, rec, taken: bool, displacement: int):
        self.stats.branches_executed += 1
        rec.branch_taken = taken
        if taken:
            self.stats.branches_taken += 1
            self.regs.PC = self.regs.PC + displacement * 2

    def _op_br(self, instr, rec):
        self._branch(rec, True, instr.offset)

    def _op_beq(self, instr, rec):
        self._branch(rec, self.regs.zero, instr.offset)

    def _op_bne(self, instr, rec):
        self._branch(rec, not self.regs.zero, instr.offset)

    def _op_sob(self, instr, rec):
        """SOB: decrement register, branch back by offset words if non-zero."""
        src = rec.src = self._resolve(AddressMode.REGISTER, instr.src_reg)
        rec.result = self.regs.add(src.reg, -1)
        self._branch(rec, rec.result != 0, -instr.offset)

    # ══════════════════════════════════════════════
    # Trace
    # ══════════════════════════════════════════════

    def add_trace_sink(self, sink: TraceSink):
        """Register a callable that receives every StepRecord."""
        self._sinks.append(sink)

    def remove_trace_sink(self, sink: TraceSink):
        self._sinks = [s for s in self._sinks if s is not sink]

    def enable_trace(self, enable: bool = True):
        """Keep every StepRecord in `trace_records`."""
        self._trace = enable

    def _emit(self, rec: StepRecord):
        if self._trace:
            self.trace_records.append(rec)
        for sink in self._sinks:
            sink(rec)

    def reset(self):
        """Reset registers, flags, statistics and run state. Memory is kept."""
        self.regs.reset()
        self.stats.reset()
        self.stop_reason = None
        self.fault = None
        self.trace_records.clear()
