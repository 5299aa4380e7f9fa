"""
Worker registry for the coordinator.
Tracks live mapper and reducer endpoints and hands out consistent snapshots.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from mrcount import config
from mrcount.errors import ValidationError

logger = logging.getLogger(__name__)


class WorkerKind(str, Enum):
    """Kind of worker a registration refers to"""
    MAPPER = "mapper"
    REDUCER = "reducer"

    @classmethod
    def parse(cls, value) -> "WorkerKind":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError('Invalid worker type. Must be "mapper" or "reducer"')


@dataclass(frozen=True)
class WorkerEndpoint:
    """A registered worker. Identity is the address within its kind."""
    address: str
    kind: WorkerKind


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a register call, read under the registry lock"""
    worker_id: int
    created: bool
    total_mappers: int
    total_reducers: int


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of the registry at one instant.

    Worker ids are positions in ``mappers``/``reducers`` and are only
    meaningful for this snapshot.
    """
    mappers: Tuple[WorkerEndpoint, ...]
    reducers: Tuple[WorkerEndpoint, ...]
    min_mappers: int
    min_reducers: int

    @property
    def mapper_count(self) -> int:
        return len(self.mappers)

    @property
    def reducer_count(self) -> int:
        return len(self.reducers)

    @property
    def ready(self) -> bool:
        return (self.mapper_count >= self.min_mappers and
                self.reducer_count >= self.min_reducers)

    def to_dict(self) -> dict:
        return {
            'mappers': [{'id': i, 'address': w.address} for i, w in enumerate(self.mappers)],
            'reducers': [{'id': i, 'address': w.address} for i, w in enumerate(self.reducers)],
            'counts': {
                'mappers': self.mapper_count,
                'reducers': self.reducer_count,
            },
            'requirements': {
                'minMappers': self.min_mappers,
                'minReducers': self.min_reducers,
            },
            'ready': self.ready,
        }


class WorkerRegistry:
    """Thread-safe registry of mapper and reducer endpoints"""

    def __init__(self, min_mappers: int = config.MIN_MAPPERS,
                 min_reducers: int = config.MIN_REDUCERS):
        self.min_mappers = min_mappers
        self.min_reducers = min_reducers
        self._workers: Dict[WorkerKind, List[str]] = {
            WorkerKind.MAPPER: [],
            WorkerKind.REDUCER: [],
        }
        self.lock = threading.Lock()

    @staticmethod
    def _validate(kind, address) -> Tuple[WorkerKind, str]:
        if not kind or not address:
            raise ValidationError('Missing required fields: type and address')
        if not isinstance(address, str):
            raise ValidationError('Invalid address. Must be a string')
        return WorkerKind.parse(kind), address

    def register(self, kind, address) -> RegistrationResult:
        """Register a worker; registering a known address returns its current id"""
        kind, address = self._validate(kind, address)
        with self.lock:
            workers = self._workers[kind]
            created = address not in workers
            if created:
                workers.append(address)
            worker_id = workers.index(address)
            result = RegistrationResult(
                worker_id=worker_id,
                created=created,
                total_mappers=len(self._workers[WorkerKind.MAPPER]),
                total_reducers=len(self._workers[WorkerKind.REDUCER]),
            )

        if created:
            logger.info(f"Registered {kind.value} #{worker_id} at {address} "
                        f"(mappers={result.total_mappers}, reducers={result.total_reducers})")
        else:
            logger.info(f"{kind.value} at {address} already registered as #{worker_id}")
        return result

    def unregister(self, kind, address) -> bool:
        """Remove a worker if present. Later workers of the same kind shift down one id."""
        kind, address = self._validate(kind, address)
        with self.lock:
            workers = self._workers[kind]
            if address not in workers:
                return False
            workers.remove(address)

        logger.info(f"Unregistered {kind.value} at {address}")
        return True

    def snapshot(self) -> RegistrySnapshot:
        """Take a consistent copy of both worker lists"""
        with self.lock:
            mappers = tuple(WorkerEndpoint(a, WorkerKind.MAPPER)
                            for a in self._workers[WorkerKind.MAPPER])
            reducers = tuple(WorkerEndpoint(a, WorkerKind.REDUCER)
                             for a in self._workers[WorkerKind.REDUCER])
        return RegistrySnapshot(
            mappers=mappers,
            reducers=reducers,
            min_mappers=self.min_mappers,
            min_reducers=self.min_reducers,
        )
