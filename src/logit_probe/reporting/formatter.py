"""Text layout of a logit report.

The layout is::

    === DEBUG LOGITS [<phase>] ===
    Request ID: <id> (seq <row>)
      [<rank>] token_id=<id> logit=<score>[ token="<text>"]
      Stats: max=<v> min=<v> mean=<v>

    === END DEBUG LOGITS ===

Scores and statistics use fixed 4-decimal precision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from logit_probe.reporting.escape import escape_token_text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from logit_probe.selection.types import RowStatistics, TopKEntry

UNKNOWN_REQUEST_ID = "unknown"


@dataclass(frozen=True, slots=True)
class RowReport:
    """Everything reported for one row of the batch.

    Attributes:
        request_id: Identifier of the sequence (``"unknown"`` if not given).
        row_index: Position of the row in the batch.
        entries: Selected top-k entries in report order.
        token_texts: Decoded text per entry, ``None`` where decoding was
            skipped or failed. Empty when no decoding was attempted.
        stats: Full-row statistics, verbose mode only.
    """

    request_id: str
    row_index: int
    entries: list[TopKEntry]
    token_texts: list[str | bytes | None] = field(default_factory=list)
    stats: RowStatistics | None = None


def format_entry(entry: TopKEntry, token_text: str | bytes | None = None) -> str:
    line = f"  [{entry.rank}] token_id={entry.token_id} logit={entry.score:.4f}"
    if token_text is not None:
        line += f' token="{escape_token_text(token_text)}"'
    return line


def format_stats(stats: RowStatistics) -> str:
    return f"  Stats: max={stats.max:.4f} min={stats.min:.4f} mean={stats.mean:.4f}"


def format_row(row: RowReport) -> list[str]:
    lines = [f"Request ID: {row.request_id} (seq {row.row_index})"]
    for i, entry in enumerate(row.entries):
        text = row.token_texts[i] if i < len(row.token_texts) else None
        lines.append(format_entry(entry, text))
    if row.stats is not None:
        lines.append(format_stats(row.stats))
    return lines


def format_report(phase: str, rows: Sequence[RowReport]) -> str:
    """Render a full report, ending with a blank line after the footer."""
    lines = [f"=== DEBUG LOGITS [{phase}] ==="]
    for i, row in enumerate(rows):
        if i > 0:
            lines.append("")
        lines.extend(format_row(row))
    lines.append("")
    lines.append("=== END DEBUG LOGITS ===")
    return "\n".join(lines) + "\n"
