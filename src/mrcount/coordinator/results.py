"""
Intermediate and final records exchanged between job phases
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class MapResult:
    """Partial word counts returned by one mapper"""
    mapper_id: int
    counts: Dict[str, int]

    @classmethod
    def from_response(cls, body: dict) -> "MapResult":
        """Build from a mapper's /map response; raises ValueError on a malformed body"""
        counts = body.get('counts')
        if 'mapperId' not in body or not isinstance(counts, dict):
            raise ValueError("map response needs 'mapperId' and a 'counts' object")
        return cls(mapper_id=body['mapperId'],
                   counts={str(word): int(count) for word, count in counts.items()})

    def to_dict(self) -> dict:
        return {'mapperId': self.mapper_id, 'counts': dict(self.counts)}


@dataclass(frozen=True)
class Contribution:
    """One mapper's count for one word"""
    mapper_id: int
    count: int

    def to_dict(self) -> dict:
        return {'mapperId': self.mapper_id, 'count': self.count}


@dataclass(frozen=True)
class ReduceResult:
    """Final count for a word and the mappers it came from"""
    word: str
    count: int
    sources: List[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, body: dict) -> "ReduceResult":
        """Build from a reducer's /reduce response; raises ValueError on a malformed body"""
        if 'word' not in body or 'count' not in body:
            raise ValueError("reduce response needs 'word' and 'count'")
        return cls(word=str(body['word']),
                   count=int(body['count']),
                   sources=list(body.get('sources') or []))

    def to_dict(self) -> dict:
        return {'word': self.word, 'count': self.count, 'sources': list(self.sources)}
