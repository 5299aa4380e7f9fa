"""
Map and reduce dispatchers.
Fan calls out to workers concurrently and join on every outcome.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from mrcount import config
from mrcount.common.http_client import post_json
from mrcount.coordinator.partitioner import Chunk
from mrcount.coordinator.registry import WorkerEndpoint
from mrcount.coordinator.results import MapResult, ReduceResult
from mrcount.coordinator.shuffle import ShuffledGroup
from mrcount.errors import AllMappersFailedError, WorkerCallError

logger = logging.getLogger(__name__)


class MapDispatcher:
    """Sends chunk i to mapper i and collects the partial counts"""

    def __init__(self, mappers: Sequence[WorkerEndpoint], timeout: float = config.CALL_TIMEOUT):
        self.mappers = tuple(mappers)
        self.timeout = timeout
        self.failed: List[str] = []

    def _call(self, chunk: Chunk, mapper: WorkerEndpoint) -> Optional[MapResult]:
        logger.info(f"Sending chunk {chunk.id} to {mapper.address}")
        try:
            body = post_json(mapper.address, '/map', {'chunk': chunk.to_dict()}, self.timeout)
            return MapResult.from_response(body)
        except (WorkerCallError, ValueError, TypeError) as e:
            logger.warning(f"Mapper {mapper.address} failed on chunk {chunk.id}: {e}")
            return None

    def dispatch(self, chunks: Sequence[Chunk]) -> List[MapResult]:
        """
        Run every map call concurrently and wait for all of them

        Failed calls are dropped. Results are returned in chunk order.

        Raises:
            AllMappersFailedError: If there was at least one chunk and no call succeeded
            ValueError: If there are more chunks than mappers
        """
        if not chunks:
            return []
        if len(chunks) > len(self.mappers):
            raise ValueError(f"{len(chunks)} chunks but only {len(self.mappers)} mappers")

        results: Dict[int, MapResult] = {}
        with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
            futures = {
                executor.submit(self._call, chunk, self.mappers[idx]): idx
                for idx, chunk in enumerate(chunks)
            }
            for future in as_completed(futures):
                idx = futures[future]
                result = future.result()
                if result is None:
                    self.failed.append(self.mappers[idx].address)
                else:
                    results[idx] = result

        if not results:
            raise AllMappersFailedError()

        logger.info(f"Map results received: {len(results)}/{len(chunks)}")
        return [results[idx] for idx in sorted(results)]


class ReduceDispatcher:
    """Sends each shuffled word to reducer (k mod reducer count) and collects totals"""

    def __init__(self, reducers: Sequence[WorkerEndpoint], timeout: float = config.CALL_TIMEOUT):
        self.reducers = tuple(reducers)
        self.timeout = timeout
        self.dropped_words: List[str] = []

    def reducer_for(self, index: int) -> WorkerEndpoint:
        return self.reducers[index % len(self.reducers)]

    def _call(self, word: str, payload: dict, reducer: WorkerEndpoint) -> Optional[ReduceResult]:
        logger.debug(f"Sending word '{word}' to {reducer.address}")
        try:
            body = post_json(reducer.address, '/reduce', payload, self.timeout)
            result = ReduceResult.from_response(body)
        except (WorkerCallError, ValueError, TypeError) as e:
            logger.warning(f"Reducer {reducer.address} failed on word '{word}': {e}")
            return None
        if result.word != word:
            logger.warning(f"Reducer {reducer.address} answered for '{result.word}' "
                           f"instead of '{word}'")
            return None
        return result

    def dispatch(self, grouped: ShuffledGroup) -> List[ReduceResult]:
        """
        Run every reduce call concurrently and wait for all of them

        Every word gets its own in-flight call; only the per-call timeout
        bounds a stuck reducer. A failed call, or an answer for a different
        word, drops its word. Results follow the grouping's word order.
        """
        words = list(grouped)
        if not words:
            return []
        if not self.reducers:
            raise ValueError(f"{len(words)} words to reduce but no reducers")

        results: Dict[int, ReduceResult] = {}
        with ThreadPoolExecutor(max_workers=len(words)) as executor:
            futures = {}
            for idx, word in enumerate(words):
                payload = {
                    'word': word,
                    'values': [c.to_dict() for c in grouped[word]],
                }
                future = executor.submit(self._call, word, payload, self.reducer_for(idx))
                futures[future] = idx
            for future in as_completed(futures):
                idx = futures[future]
                result = future.result()
                if result is None:
                    self.dropped_words.append(words[idx])
                else:
                    results[idx] = result

        logger.info(f"Reduce results received: {len(results)}/{len(words)}")
        return [results[idx] for idx in sorted(results)]
