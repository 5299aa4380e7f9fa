"""
Job orchestration: precondition check, partition, map, shuffle, reduce, assemble.
One MapReduceJob instance runs exactly one job against one registry snapshot.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from mrcount import config
from mrcount.coordinator.dispatch import MapDispatcher, ReduceDispatcher
from mrcount.coordinator.metrics import JobMetrics
from mrcount.coordinator.partitioner import Chunk, split_into_chunks
from mrcount.coordinator.registry import RegistrySnapshot
from mrcount.coordinator.results import MapResult, ReduceResult
from mrcount.coordinator.shuffle import ShuffledGroup, shuffle, shuffled_to_dict
from mrcount.errors import (InsufficientMappersError, InsufficientReducersError,
                            ValidationError)

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Status of a MapReduce job"""
    START = "start"
    PRECONDITION_CHECK = "precondition_check"
    PARTITION = "partition"
    MAP = "map"
    SHUFFLE = "shuffle"
    REDUCE = "reduce"
    ASSEMBLE = "assemble"
    DONE = "done"
    ABORTED = "aborted"


_PIPELINE = [
    JobStatus.START,
    JobStatus.PRECONDITION_CHECK,
    JobStatus.PARTITION,
    JobStatus.MAP,
    JobStatus.SHUFFLE,
    JobStatus.REDUCE,
    JobStatus.ASSEMBLE,
    JobStatus.DONE,
]


@dataclass
class JobResult:
    """Final aggregate plus the full execution trace of a job"""
    mappers_used: int
    reducers_used: int
    chunks: List[Chunk] = field(default_factory=list)
    map_results: List[MapResult] = field(default_factory=list)
    shuffled: ShuffledGroup = field(default_factory=dict)
    reduce_results: List[ReduceResult] = field(default_factory=list)
    final_counts: Dict[str, int] = field(default_factory=dict)
    metrics: Optional[JobMetrics] = None

    def to_dict(self) -> dict:
        return {
            'success': True,
            'workersUsed': {
                'mappers': self.mappers_used,
                'reducers': self.reducers_used,
            },
            'chunks': [c.to_dict() for c in self.chunks],
            'mapResults': [r.to_dict() for r in self.map_results],
            'shuffled': shuffled_to_dict(self.shuffled),
            'reduceResults': [r.to_dict() for r in self.reduce_results],
            'finalCounts': dict(self.final_counts),
            'metrics': self.metrics.to_dict() if self.metrics else {},
        }


class MapReduceJob:
    """Runs one word count job end to end against a fixed registry snapshot"""

    def __init__(self, snapshot: RegistrySnapshot, timeout: float = config.CALL_TIMEOUT):
        self.snapshot = snapshot
        self.timeout = timeout
        self.status = JobStatus.START
        self.error: Optional[Exception] = None
        self.metrics = JobMetrics()

    def _transition(self, new_status: JobStatus):
        expected = _PIPELINE[_PIPELINE.index(self.status) + 1] \
            if self.status in _PIPELINE[:-1] else None
        if new_status != expected:
            raise ValueError(f"Cannot transition from {self.status.value} to {new_status.value}")
        self.status = new_status
        logger.debug(f"Job entered {new_status.value}")

    def _abort(self, error: Exception):
        self.status = JobStatus.ABORTED
        self.error = error
        self.metrics.finish()
        logger.error(f"Job aborted: {error}")

    def check_preconditions(self):
        """Raise if the snapshot does not hold enough workers (never fewer than one of each)"""
        min_mappers = max(self.snapshot.min_mappers, 1)
        min_reducers = max(self.snapshot.min_reducers, 1)
        if self.snapshot.mapper_count < min_mappers:
            raise InsufficientMappersError(min_mappers, self.snapshot.mapper_count)
        if self.snapshot.reducer_count < min_reducers:
            raise InsufficientReducersError(min_reducers, self.snapshot.reducer_count)

    def run(self, text: str) -> JobResult:
        """
        Execute the job

        Returns:
            JobResult with the final counts and every intermediate stage

        Raises:
            InsufficientMappersError, InsufficientReducersError: Before any chunk is created
            ValidationError: If text is not a string, after the worker check
            AllMappersFailedError: If no map call succeeded
            RuntimeError: If this job instance was already run
        """
        if self.status != JobStatus.START:
            raise RuntimeError(f"Job already run (status: {self.status.value})")

        try:
            return self._run(text)
        except Exception as e:
            self._abort(e)
            raise

    def _run(self, text: str) -> JobResult:
        snapshot = self.snapshot

        self._transition(JobStatus.PRECONDITION_CHECK)
        self.check_preconditions()
        if not isinstance(text, str):
            raise ValidationError('Missing required field: text')
        logger.info(f"Starting job with {snapshot.mapper_count} mappers "
                    f"and {snapshot.reducer_count} reducers")

        self._transition(JobStatus.PARTITION)
        chunks = split_into_chunks(text, snapshot.mapper_count)
        self.metrics.num_words = sum(len(c.text.split()) for c in chunks)
        self.metrics.num_chunks = len(chunks)
        logger.info(f"Split input into {len(chunks)} chunks")

        self._transition(JobStatus.MAP)
        self.metrics.start_phase('map')
        map_dispatcher = MapDispatcher(snapshot.mappers, timeout=self.timeout)
        map_results = map_dispatcher.dispatch(chunks)
        self.metrics.end_phase('map')
        self.metrics.num_map_results = len(map_results)
        self.metrics.failed_mappers = len(map_dispatcher.failed)

        self._transition(JobStatus.SHUFFLE)
        self.metrics.start_phase('shuffle')
        grouped = shuffle(map_results)
        self.metrics.end_phase('shuffle')
        self.metrics.num_keys = len(grouped)
        logger.info(f"Grouped map output into {len(grouped)} keys")

        self._transition(JobStatus.REDUCE)
        self.metrics.start_phase('reduce')
        reduce_dispatcher = ReduceDispatcher(snapshot.reducers, timeout=self.timeout)
        reduce_results = reduce_dispatcher.dispatch(grouped)
        self.metrics.end_phase('reduce')
        self.metrics.num_reduce_results = len(reduce_results)
        self.metrics.dropped_words = len(reduce_dispatcher.dropped_words)

        self._transition(JobStatus.ASSEMBLE)
        final_counts = {r.word: r.count for r in reduce_results}
        self.metrics.finish()
        result = JobResult(
            mappers_used=snapshot.mapper_count,
            reducers_used=snapshot.reducer_count,
            chunks=chunks,
            map_results=map_results,
            shuffled=grouped,
            reduce_results=reduce_results,
            final_counts=final_counts,
            metrics=self.metrics,
        )

        self._transition(JobStatus.DONE)
        logger.info(f"Job complete: {len(final_counts)} distinct words in "
                    f"{self.metrics.total_time_seconds:.3f}s "
                    f"(failed mappers={self.metrics.failed_mappers}, "
                    f"dropped words={self.metrics.dropped_words})")
        return result
