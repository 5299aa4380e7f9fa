"""
Input partitioning for map tasks.
"""

import math
from dataclasses import dataclass, asdict
from typing import List


@dataclass(frozen=True)
class Chunk:
    """A contiguous run of input words assigned to one mapper"""
    id: int
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


def split_into_chunks(text: str, num_chunks: int) -> List[Chunk]:
    """
    Split text into at most num_chunks chunks of consecutive words

    Every chunk but the last holds ceil(words / num_chunks) words. Chunks that
    would start past the end of the input are skipped, so fewer chunks come
    back when num_chunks exceeds the word count. Empty or whitespace-only
    input yields no chunks.

    Args:
        text: Raw input text
        num_chunks: Number of chunks requested (the mapper count)

    Returns:
        List of Chunk objects ordered by id

    Raises:
        ValueError: If num_chunks is less than 1
    """
    if num_chunks < 1:
        raise ValueError(f"num_chunks must be at least 1, got {num_chunks}")

    words = text.split()
    if not words:
        return []

    chunk_size = math.ceil(len(words) / num_chunks)
    chunks = []
    for i in range(num_chunks):
        start = i * chunk_size
        if start >= len(words):
            break
        end = min(start + chunk_size, len(words))
        chunks.append(Chunk(id=i, text=' '.join(words[start:end])))

    return chunks
