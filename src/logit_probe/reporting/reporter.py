"""Top-k logit reporter.

Called by the inference loop after a forward pass. When reporting is
disabled the call returns after a single policy check. Otherwise the score
buffer is copied to host memory, the top-k tokens of every row are
extracted, and the rendered report is written to the sink in one piece.

The reporter is an observer: it never mutates the scores it is given and
only raises for caller errors (negative k, unusable buffer shape).
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from logit_probe.config import LogitProbeConfig
from logit_probe.decoding.registry import DecoderRegistry, get_global_registry
from logit_probe.exceptions import ScoreShapeError
from logit_probe.policy import ActivationPolicy
from logit_probe.reporting.formatter import UNKNOWN_REQUEST_ID, RowReport, format_report
from logit_probe.reporting.sinks import ReportSink, SinkRegistry, StreamSink
from logit_probe.selection.topk import check_top_k, row_statistics, top_k_entries

if TYPE_CHECKING:
    from collections.abc import Sequence

    from logit_probe.decoding.base import TokenDecoder
    from logit_probe.selection.types import TopKEntry

logger = logging.getLogger("logit_probe")


def to_host_matrix(scores: Any) -> np.ndarray:
    """Copy *scores* into a contiguous host array of shape (batch, vocab).

    Accelerator tensors are moved with ``.detach().cpu()``; anything else
    goes through ``np.asarray``. A copy is always made so the caller's
    buffer is never aliased.

    Args:
        scores: A torch tensor, numpy array or nested sequence. 1-D input
            is treated as a batch of one row.

    Raises:
        ScoreShapeError: If *scores* has more than two dimensions.
    """
    if isinstance(scores, np.ndarray):
        host = scores
    else:
        # .cpu() moves GPU tensors (CUDA/MPS) to host memory; no-op on CPU.
        try:
            on_host = scores.detach().cpu()
        except AttributeError:
            host = np.asarray(scores)
        else:
            try:
                host = on_host.numpy()
            except TypeError:
                # bfloat16 has no numpy dtype.
                host = on_host.float().numpy()

    if host.ndim == 1:
        host = host.reshape(1, -1)
    elif host.ndim != 2:
        raise ScoreShapeError(f"Expected scores of shape (batch, vocab), got {host.shape}")

    if not np.issubdtype(host.dtype, np.floating):
        host = host.astype(np.float64)
    return np.array(host, copy=True, order="C")


def resolve_request_id(request_ids: Sequence[str], row_index: int) -> str:
    if row_index < len(request_ids):
        return str(request_ids[row_index])
    return UNKNOWN_REQUEST_ID


class TopKReporter:
    """Writes per-row top-k score reports.

    Args:
        policy: Activation and verbosity. Defaults to reading the
            environment once via :meth:`ActivationPolicy.from_env`.
        registry: Source of the token decoder. Defaults to the
            process-wide registry.
        sink: Report destination. Defaults to stderr.
        default_k: k used when :meth:`report` is called without one.
    """

    def __init__(
        self,
        policy: ActivationPolicy | None = None,
        registry: DecoderRegistry | None = None,
        sink: ReportSink | None = None,
        default_k: int = 10,
    ) -> None:
        self._policy = policy if policy is not None else ActivationPolicy.from_env()
        self._registry = registry if registry is not None else get_global_registry()
        self._sink = sink if sink is not None else StreamSink()
        self._default_k = check_top_k(default_k)

    @classmethod
    def from_config(
        cls,
        config: LogitProbeConfig,
        registry: DecoderRegistry | None = None,
    ) -> TopKReporter:
        """Build a reporter whose policy, sink and k all come from *config*."""
        return cls(
            policy=ActivationPolicy.from_config(config),
            registry=registry,
            sink=SinkRegistry.build(config),
            default_k=config.top_k,
        )

    @property
    def policy(self) -> ActivationPolicy:
        return self._policy

    @property
    def registry(self) -> DecoderRegistry:
        return self._registry

    @property
    def sink(self) -> ReportSink:
        return self._sink

    @property
    def default_k(self) -> int:
        return self._default_k

    def report(
        self,
        scores: Any,
        phase: str,
        request_ids: Sequence[str] = (),
        k: int | None = None,
    ) -> str | None:
        """Report the top-k tokens of every row of *scores*.

        Args:
            scores: (batch, vocab) scores; see :func:`to_host_matrix`.
            phase: Label of the engine phase (e.g. ``"PREFILL"``, ``"DECODE"``).
            request_ids: One identifier per row; missing rows use ``"unknown"``.
            k: Tokens per row. ``None`` uses :attr:`default_k`.

        Returns:
            The report text that was written, or ``None`` when disabled.

        Raises:
            InvalidTopKError: If *k* is negative.
            ScoreShapeError: If *scores* is not 1-D or 2-D.
        """
        if not self._policy.is_enabled():
            return None

        rows = self.collect(scores, request_ids, k, verbose=self._policy.is_verbose())
        text = format_report(phase, rows)
        self._sink.write(text)
        logger.debug("Reported top-k for %d rows in phase %s", len(rows), phase)
        return text

    def collect(
        self,
        scores: Any,
        request_ids: Sequence[str] = (),
        k: int | None = None,
        verbose: bool = False,
    ) -> list[RowReport]:
        """Extract per-row report data without rendering or writing it.

        Unlike :meth:`report`, this ignores the activation policy.
        """
        top_k = check_top_k(self._default_k if k is None else k)
        matrix = to_host_matrix(scores)
        vocab_size = matrix.shape[1]
        decoder = self._registry.get() if verbose else None

        rows: list[RowReport] = []
        for row_index in range(matrix.shape[0]):
            row = matrix[row_index]
            entries = top_k_entries(row, top_k)
            token_texts = self._decode_entries(decoder, entries) if decoder is not None else []
            stats = row_statistics(row) if verbose and vocab_size > 0 else None
            rows.append(
                RowReport(
                    request_id=resolve_request_id(request_ids, row_index),
                    row_index=row_index,
                    entries=entries,
                    token_texts=token_texts,
                    stats=stats,
                )
            )
        return rows

    def _decode_entries(
        self, decoder: TokenDecoder, entries: Sequence[TopKEntry]
    ) -> list[str | bytes | None]:
        texts: list[str | bytes | None] = []
        for entry in entries:
            result = self._registry.id_to_text(decoder, entry.token_id)
            texts.append(result.text if result.ok else None)
        return texts


@functools.lru_cache(maxsize=1)
def default_reporter() -> TopKReporter:
    """Process-wide reporter configured from the environment.

    The environment is read on first use only; call
    ``default_reporter.cache_clear()`` to pick up changes.
    """
    return TopKReporter.from_config(LogitProbeConfig(), registry=get_global_registry())


def debug_print_logits(
    scores: Any,
    phase: str,
    request_ids: Sequence[str] = (),
    top_k: int | None = None,
) -> str | None:
    """Report *scores* with the process-wide reporter.

    Returns:
        The report text, or ``None`` when reporting is disabled.
    """
    return default_reporter().report(scores, phase, request_ids, top_k)
