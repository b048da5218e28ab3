"""Duplicate suppression for extracted candidates.

Statement text carries no stable transaction identifier, so identity is the
heuristic key ``(date, amount in cents, first 30 characters of the
description)``. Two genuinely distinct transactions that agree on all three
collapse into one; that loss is accepted in exchange for removing the
duplicates produced by running two parser passes over the same lines.

The same key is used by the fallback pass when it checks whether a row was
already found, so both places agree on what "the same transaction" means.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Candidate

DESCRIPTION_KEY_LEN = 30

type CandidateKey = tuple[str, int, str]


def candidate_key(candidate: Candidate) -> CandidateKey:
    cents = int((candidate.amount * 100).to_integral_value())
    return (candidate.date, cents, candidate.description[:DESCRIPTION_KEY_LEN])


def dedupe_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Drop later candidates whose key was already seen; order is preserved."""

    seen: set[CandidateKey] = set()
    unique: list[Candidate] = []
    for c in candidates:
        key = candidate_key(c)
        if key in seen:
            continue
        seen.add(key)
        unique.append(c)
    return unique


__all__ = ["DESCRIPTION_KEY_LEN", "CandidateKey", "candidate_key", "dedupe_candidates"]
