"""Deterministic top-k selection over a single score row.

Ordering is the total order ``(score desc, token_id asc)``. NaN scores are
ordered as ``-inf``. Selection is partial: ``np.partition`` finds the k-th
key in linear time, and at most k candidates are sorted.
"""

from __future__ import annotations

import numpy as np

from logit_probe.exceptions import InvalidTopKError
from logit_probe.selection.types import RowStatistics, TopKEntry


def check_top_k(k: int) -> int:
    """Validate a requested top-k.

    Raises:
        InvalidTopKError: If *k* is negative.
    """
    if k < 0:
        raise InvalidTopKError(f"top_k must be >= 0, got {k}")
    return int(k)


def _sort_keys(row: np.ndarray) -> np.ndarray:
    """Ascending sort keys equivalent to descending scores (NaN -> +inf key)."""
    keys = -row.astype(np.float64, copy=True)
    keys[np.isnan(keys)] = np.inf
    return keys


def top_k_entries(row: np.ndarray, k: int) -> list[TopKEntry]:
    """Select the ``min(k, len(row))`` highest-scoring tokens of *row*.

    Args:
        row: 1-D score array (vocab_size,). Not modified.
        k: Number of tokens to return (>= 0).

    Returns:
        Entries sorted by score descending; equal scores appear in ascending
        token-id order.

    Raises:
        InvalidTopKError: If *k* is negative.
    """
    check_top_k(k)
    vocab_size = int(row.shape[0])
    effective_k = min(k, vocab_size)
    if effective_k == 0:
        return []

    keys = _sort_keys(row)

    if effective_k < vocab_size:
        # Keys tied with the k-th key are taken in index order, only as many
        # as still fit, so the candidate set never exceeds k.
        kth_key = np.partition(keys, effective_k - 1)[effective_k - 1]
        above = np.flatnonzero(keys < kth_key)
        tied = np.flatnonzero(keys == kth_key)[: effective_k - above.size]
        candidates = np.concatenate((above, tied))
    else:
        candidates = np.arange(vocab_size)

    # lexsort: last key is primary.
    order = np.lexsort((candidates, keys[candidates]))[:effective_k]
    selected = candidates[order]

    return [
        TopKEntry(rank=rank, token_id=int(token_id), score=float(row[token_id]))
        for rank, token_id in enumerate(selected)
    ]


def row_statistics(row: np.ndarray) -> RowStatistics:
    """Compute max, min and mean over the full row.

    Args:
        row: Non-empty 1-D score array.
    """
    vocab_size = int(row.shape[0])
    total = float(np.sum(row, dtype=np.float64))
    return RowStatistics(
        max=float(np.max(row)),
        min=float(np.min(row)),
        mean=total / vocab_size,
    )
