"""logit-probe: top-k logit inspection for batched LLM inference.

An observer that, when switched on through ``LOGIT_PROBE_DEBUG_LOGITS``,
reports the highest-scoring tokens of every sequence in a batch (and in
verbose mode their decoded text and row statistics) without touching the
engine's numerical results.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("logit-probe")
except PackageNotFoundError:
    __version__ = "0.0.0"

from logit_probe.config import LogitProbeConfig
from logit_probe.decoding import (
    DecodeResult,
    DecoderRegistry,
    TokenDecoder,
    get_decoder,
    get_global_registry,
    register_decoder,
)
from logit_probe.exceptions import (
    ConfigValidationError,
    DecodeError,
    InvalidTopKError,
    LogitProbeError,
    PreconditionError,
    ScoreShapeError,
)
from logit_probe.policy import ActivationPolicy
from logit_probe.processor import TopKLogitsProcessor
from logit_probe.reporting import TopKReporter, debug_print_logits
from logit_probe.selection import RowStatistics, TopKEntry, top_k_entries

__all__ = [
    "ActivationPolicy",
    "ConfigValidationError",
    "DecodeError",
    "DecodeResult",
    "DecoderRegistry",
    "InvalidTopKError",
    "LogitProbeConfig",
    "LogitProbeError",
    "PreconditionError",
    "RowStatistics",
    "ScoreShapeError",
    "TokenDecoder",
    "TopKEntry",
    "TopKLogitsProcessor",
    "TopKReporter",
    "__version__",
    "debug_print_logits",
    "get_decoder",
    "get_global_registry",
    "register_decoder",
    "top_k_entries",
]
