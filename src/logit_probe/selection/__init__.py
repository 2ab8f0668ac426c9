"""Top-k extraction subsystem for logit-probe.

Deterministic partial selection of the highest-scoring tokens of a row,
ordered by score descending with ties broken by ascending token id, plus
full-row summary statistics.
"""

from logit_probe.selection.topk import row_statistics, top_k_entries
from logit_probe.selection.types import RowStatistics, TopKEntry

__all__ = [
    "RowStatistics",
    "TopKEntry",
    "row_statistics",
    "top_k_entries",
]
