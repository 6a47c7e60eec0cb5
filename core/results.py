# core/results.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


@dataclass(frozen=True)
class CycleDescriptor:
    offset_before_cycle: int            # j: first step carrying the repeated fingerprint
    cycle_length: int                   # i - j
    value_at_offset_before_cycle: int   # value[j]
    value_at_cycle_end: int             # value[i]
    cycle_step_values: Tuple[int, ...]  # value[j+m] - value[j], m = 0..cycle_length-1
    last_simulated_step: int            # i

    @property
    def cycle_delta(self) -> int:
        return self.value_at_cycle_end - self.value_at_offset_before_cycle


@dataclass
class PartitionResult:
    best_score: int
    best_partition: Optional[Tuple[List[Any], List[Any]]]
    partitions_evaluated: int
    partitions_skipped: int
    subsets_solved: int
    meta: dict = field(default_factory=dict)
