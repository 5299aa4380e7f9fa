"""
Shuffle stage: regroup mapper output by word.
"""

from typing import Dict, Iterable, List

from mrcount.coordinator.results import Contribution, MapResult

ShuffledGroup = Dict[str, List[Contribution]]


def shuffle(map_results: Iterable[MapResult]) -> ShuffledGroup:
    """
    Group every (word, count) pair by word

    Words keep the order in which they were first seen, which fixes the
    round-robin reducer assignment. Words are compared as-is.
    """
    grouped: ShuffledGroup = {}
    for result in map_results:
        for word, count in result.counts.items():
            grouped.setdefault(word, []).append(Contribution(result.mapper_id, count))
    return grouped


def shuffled_to_dict(grouped: ShuffledGroup) -> dict:
    return {word: [c.to_dict() for c in contributions]
            for word, contributions in grouped.items()}
