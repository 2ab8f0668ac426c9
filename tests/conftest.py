"""Shared pytest fixtures for logit-probe tests.

Provides isolated decoder registries, in-memory sinks, and sample score
matrices that are used across multiple test modules.
"""

from __future__ import annotations

import io
from collections.abc import Iterator

import numpy as np
import pytest

from logit_probe.decoding.adapters import VocabularyDecoder
from logit_probe.decoding.registry import DecoderRegistry
from logit_probe.reporting.reporter import default_reporter
from logit_probe.reporting.sinks import StreamSink


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove LOGIT_PROBE_* variables and the cached default reporter."""
    for name in ("LOGIT_PROBE_DEBUG_LOGITS", "LOGIT_PROBE_TOP_K", "LOGIT_PROBE_SINK"):
        monkeypatch.delenv(name, raising=False)
    default_reporter.cache_clear()
    yield
    default_reporter.cache_clear()


@pytest.fixture
def registry() -> DecoderRegistry:
    """Return a fresh, empty DecoderRegistry (not the process-wide one)."""
    return DecoderRegistry()


@pytest.fixture
def vocab_decoder() -> VocabularyDecoder:
    """Return a five-token vocabulary including control characters."""
    return VocabularyDecoder(["<s>", "the", "\n", "\tcat", "café"])


@pytest.fixture
def buffer() -> io.StringIO:
    """Return an in-memory text stream to capture report output."""
    return io.StringIO()


@pytest.fixture
def buffer_sink(buffer: io.StringIO) -> StreamSink:
    """Return a StreamSink writing into ``buffer``."""
    return StreamSink(buffer)


@pytest.fixture
def tie_scores() -> np.ndarray:
    """Return one row with a tie between token ids 1 and 2.

    Scores ``[0.1, 0.9, 0.9, 0.05, 0.3]``; the top-3 is ``[1, 2, 4]``.
    """
    return np.array([[0.1, 0.9, 0.9, 0.05, 0.3]], dtype=np.float32)


@pytest.fixture
def batch_scores() -> np.ndarray:
    """Return a (2, 5) float32 batch with distinct rows."""
    return np.array(
        [
            [0.1, 0.9, 0.9, 0.05, 0.3],
            [2.0, -1.0, 0.5, 3.0, 0.0],
        ],
        dtype=np.float32,
    )


@pytest.fixture
def large_vocab_scores() -> np.ndarray:
    """Return random scores for a realistic vocabulary (2, 32000).

    Uses a fixed RNG seed for reproducibility.
    """
    rng = np.random.default_rng(seed=12345)
    return rng.standard_normal((2, 32000)).astype(np.float32)
