"""
Concept Extractor

Ranks the Wikipedia concepts shared by a set of reference materials. The
result drives the weighted `should` clauses of a recommendation query.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence, Tuple

from .models import MaterialRecord

CONCEPTS_PER_DOCUMENT = 30
COMMON_CONCEPTS_DROPPED = 2
MAX_CONCEPTS = 20


def concept_names(record: MaterialRecord, top: int = CONCEPTS_PER_DOCUMENT) -> List[str]:
    """Names of the record's first `top` concepts, in index ranking order."""
    names = []
    for concept in (record.wikipedia or [])[:top]:
        if concept.label:
            names.append(concept.label)
    return names


def rank_concepts(per_document: Iterable[Sequence[str]]) -> List[Tuple[str, int]]:
    """
    Count concept occurrences across documents and keep the informative ones.

    Parameters
    ----------
    per_document : Iterable[Sequence[str]]
        Concept names of each reference document, already truncated.

    Returns
    -------
    List[Tuple[str, int]]
        (name, frequency) pairs, most frequent first. Ties keep first-seen
        order. The two most frequent concepts are dropped when at least
        three distinct ones exist, and at most 20 are kept after that.
    """
    counts: Counter = Counter()
    for names in per_document:
        counts.update(names)

    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    start = COMMON_CONCEPTS_DROPPED if len(ranked) > COMMON_CONCEPTS_DROPPED else 0
    return ranked[start:start + MAX_CONCEPTS]


def extract_concepts(references: Sequence[MaterialRecord]) -> List[Tuple[str, int]]:
    return rank_concepts(concept_names(record) for record in references)


def concept_weights(concepts: Sequence[Tuple[str, int]], n_references: int) -> List[Tuple[str, float]]:
    """Boost per concept: frequency divided by the number of references."""
    if n_references <= 0:
        return []
    return [(name, count / n_references) for name, count in concepts]
