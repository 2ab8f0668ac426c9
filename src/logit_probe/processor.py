"""vLLM V1 LogitsProcessor that reports top-k logits without changing them.

Registered via entry point::

    [project.entry-points."vllm.logits_processors"]
    logit_probe = "logit_probe.processor:TopKLogitsProcessor"

The processor is argmax-invariant: ``apply()`` hands the batch to a
:class:`~logit_probe.reporting.reporter.TopKReporter` and returns the
logits object untouched. Request identifiers are tracked per batch slot
from the engine's batch updates.
"""

from __future__ import annotations

import logging
from typing import Any

from logit_probe.config import LogitProbeConfig
from logit_probe.decoding.registry import DecoderRegistry, get_global_registry
from logit_probe.reporting.formatter import UNKNOWN_REQUEST_ID
from logit_probe.reporting.reporter import TopKReporter

logger = logging.getLogger("logit_probe")

DEFAULT_PHASE = "DECODE"


def _request_label(added: Any, req_index: int) -> str:
    """Best available identifier for a newly added request."""
    for attr in ("request_id", "req_id"):
        value = getattr(added, attr, None)
        if value:
            return str(value)
    return f"slot-{req_index}"


def _is_swap(directionality: Any) -> bool:
    """Whether a move record exchanges both slots (vLLM ``MoveDirectionality.SWAP``)."""
    name = getattr(directionality, "name", directionality)
    return isinstance(name, str) and name.upper() == "SWAP"


class TopKLogitsProcessor:
    """Observer logits processor for vLLM-style engines.

    Constructor signature matches vLLM V1's ``LogitsProcessor`` ABC::

        __init__(self, vllm_config, device, is_pin_memory)
    """

    def __init__(
        self,
        vllm_config: Any = None,
        device: Any = None,
        is_pin_memory: bool = False,
        *,
        config: LogitProbeConfig | None = None,
        registry: DecoderRegistry | None = None,
        reporter: TopKReporter | None = None,
        phase: str = DEFAULT_PHASE,
    ) -> None:
        """Initialize the processor and its reporter.

        Args:
            vllm_config: vLLM's ``VllmConfig`` object. Unused beyond logging;
                ``None`` in tests.
            device: ``torch.device`` of the logits. Unused; reports always
                copy to host.
            is_pin_memory: Accepted for interface compatibility.
            config: Configuration; loaded from the environment if omitted.
            registry: Decoder registry; the process-wide one if omitted.
            reporter: Fully built reporter, overriding *config* and *registry*.
            phase: Phase label written in each report header.
        """
        self._device = device
        self._is_pin_memory = is_pin_memory
        self._config = config if config is not None else LogitProbeConfig()
        if reporter is None:
            reporter = TopKReporter.from_config(
                self._config,
                registry=registry if registry is not None else get_global_registry(),
            )
        self._reporter = reporter
        self._phase = phase

        # Maps batch slot to request identifier.
        self._request_ids: dict[int, str] = {}

        logger.info(
            "TopKLogitsProcessor initialized: enabled=%s, verbose=%s, top_k=%d",
            self._reporter.policy.is_enabled(),
            self._reporter.policy.is_verbose(),
            self._reporter.default_k,
        )

    def is_argmax_invariant(self) -> bool:
        """Return ``True``: reporting never changes token selection."""
        return True

    @classmethod
    def validate_params(cls, params: Any) -> None:
        """Accept every request; the processor has no per-request options."""

    def update_state(self, batch_update: Any | None) -> None:
        """Track which request occupies each batch slot.

        Processes changes in the required order: removed -> moved -> added.
        A ``SWAP`` move exchanges both slots; any other move overwrites the
        destination.

        Args:
            batch_update: A ``BatchUpdate`` with ``removed``, ``moved``,
                and ``added`` sequences, or ``None`` if no changes.
        """
        if batch_update is None:
            return

        for removed in getattr(batch_update, "removed", None) or []:
            req_idx = removed if isinstance(removed, int) else getattr(removed, "req_index", None)
            if req_idx is not None:
                self._request_ids.pop(req_idx, None)

        for moved in getattr(batch_update, "moved", None) or []:
            if hasattr(moved, "src_index") and hasattr(moved, "dst_index"):
                src, dst = moved.src_index, moved.dst_index
                directionality = getattr(moved, "directionality", None)
            elif isinstance(moved, tuple) and len(moved) >= 2:
                src, dst = moved[0], moved[1]
                directionality = moved[2] if len(moved) > 2 else None
            else:
                continue
            src_id = self._request_ids.pop(src, None)
            dst_id = self._request_ids.pop(dst, None)
            if src_id is not None:
                self._request_ids[dst] = src_id
            if dst_id is not None and _is_swap(directionality):
                self._request_ids[src] = dst_id

        for added in getattr(batch_update, "added", None) or []:
            if isinstance(added, tuple):
                req_idx = added[0] if added else None
            else:
                req_idx = getattr(added, "req_index", None)
            if req_idx is None:
                continue
            self._request_ids[req_idx] = _request_label(added, req_idx)

    def request_ids(self, num_rows: int) -> list[str]:
        """Identifiers for the first *num_rows* batch slots."""
        return [self._request_ids.get(i, UNKNOWN_REQUEST_ID) for i in range(num_rows)]

    def apply(self, logits: Any) -> Any:
        """Report the batch and return *logits* unchanged.

        Args:
            logits: 2-D tensor of shape ``(num_requests, vocab_size)``.
                May be a ``torch.Tensor`` or a ``numpy.ndarray``.
        """
        if not self._reporter.policy.is_enabled():
            return logits

        shape = getattr(logits, "shape", None)
        if not shape or shape[0] == 0:
            return logits

        num_rows = shape[0] if len(shape) > 1 else 1
        try:
            self._reporter.report(logits, self._phase, self.request_ids(num_rows))
        except Exception:  # Intentional: reporting must never break the engine step
            logger.warning("Top-k logit report failed for phase %s", self._phase, exc_info=True)
        return logits

    @property
    def reporter(self) -> TopKReporter:
        return self._reporter

    @property
    def config(self) -> LogitProbeConfig:
        return self._config
