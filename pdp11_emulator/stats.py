"""
PDP-11 Emulator — Execution Statistics

Monotonic counters bumped as a side effect of fetch, operand resolution
and branch execution. Read once when the run stops.
"""

from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class Statistics:
    instructions_executed: int = 0
    instruction_words_fetched: int = 0
    data_words_read: int = 0
    data_words_written: int = 0
    branches_executed: int = 0
    branches_taken: int = 0

    @property
    def branches_taken_percent(self) -> Optional[float]:
        """Share of executed branches that were taken, or None if none ran."""
        if self.branches_executed == 0:
            return None
        return self.branches_taken / self.branches_executed * 100

    def as_dict(self) -> dict:
        return asdict(self)

    def reset(self):
        for name in self.as_dict():
            setattr(self, name, 0)
