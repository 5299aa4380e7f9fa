"""
Word count map and reduce functions used by the reference workers.
"""

from collections import Counter


def count_words(text):
    """
    Map function: count lowercased whitespace-separated words.

    Args:
        text: Chunk text

    Returns:
        Dict of word -> count, in first-seen order
    """
    return dict(Counter(text.lower().split()))


def sum_counts(values):
    """
    Reduce function: total the per-mapper counts for one word.

    Args:
        values: List of {'mapperId': ..., 'count': ...} dicts

    Returns:
        (total, sources) where sources labels each contributing mapper
    """
    total = sum(int(v['count']) for v in values)
    sources = [f"Mapper-{v['mapperId']}" for v in values]
    return total, sources
