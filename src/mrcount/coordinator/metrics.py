"""
Timing and volume metrics for one MapReduce job.
"""

import time
from dataclasses import dataclass, asdict, field
from typing import Dict


@dataclass
class JobMetrics:
    """Metrics for a single MapReduce job execution."""

    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0
    phase_times: Dict[str, float] = field(default_factory=dict)
    num_words: int = 0
    num_chunks: int = 0
    num_map_results: int = 0
    num_keys: int = 0
    num_reduce_results: int = 0
    failed_mappers: int = 0
    dropped_words: int = 0

    def start_phase(self, phase: str):
        """Record the start of a phase."""
        self.phase_times[f"{phase}_start"] = time.time()

    def end_phase(self, phase: str):
        """Record the end of a phase."""
        self.phase_times[f"{phase}_end"] = time.time()

    def phase_seconds(self, phase: str) -> float:
        """Duration of a phase, 0.0 if it never ran to completion."""
        start = self.phase_times.get(f"{phase}_start")
        end = self.phase_times.get(f"{phase}_end")
        if start is None or end is None:
            return 0.0
        return end - start

    def finish(self):
        self.end_time = time.time()

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return (self.end_time or time.time()) - self.start_time

    def to_dict(self) -> dict:
        """Convert metrics to a JSON-friendly dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = round(self.total_time_seconds, 6)
        for phase in ('map', 'shuffle', 'reduce'):
            data[f"{phase}_seconds"] = round(self.phase_seconds(phase), 6)
        return data
