"""Data types for the top-k extraction subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TopKEntry:
    """One selected token of a row.

    Attributes:
        rank: Position in the report (0 = highest score).
        token_id: Vocabulary index.
        score: Raw score (logit) of the token.
    """

    rank: int
    token_id: int
    score: float


@dataclass(frozen=True, slots=True)
class RowStatistics:
    """Summary statistics over an entire row, not just its top-k.

    Attributes:
        max: Largest score.
        min: Smallest score.
        mean: Sum of all scores divided by the vocabulary size.
    """

    max: float
    min: float
    mean: float
