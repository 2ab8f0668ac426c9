"""Process-wide registry for the token decoder.

The decoder is registered by whatever code sets up tokenization and read
by diagnostics anywhere in the inference loop. Writers are serialized by a
lock; readers load a single reference and never take the lock, so a reader
sees either the previous decoder or the new one, never a partial value.

Tests and embedders can construct their own :class:`DecoderRegistry`
instead of using the process-wide one.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from logit_probe.decoding.adapters import as_decoder
from logit_probe.decoding.base import DecodeResult, TokenDecoder

logger = logging.getLogger("logit_probe")


class DecoderRegistry:
    """Holds zero or one :class:`TokenDecoder`.

    ``register()`` is idempotent and last-write-wins. ``get()`` returns
    ``None`` until something has been registered.
    """

    def __init__(self) -> None:
        self._decoder: TokenDecoder | None = None
        self._write_lock = threading.Lock()

    def register(self, decoder: Any) -> TokenDecoder:
        """Store *decoder*, replacing any previous one.

        Args:
            decoder: A :class:`TokenDecoder` or anything :func:`as_decoder`
                accepts (tokenizer, vocabulary list, callable).

        Returns:
            The decoder as stored.
        """
        resolved = as_decoder(decoder)
        with self._write_lock:
            previous = self._decoder
            self._decoder = resolved
        if previous is not None and previous is not resolved:
            logger.info("Replaced token decoder %s with %s", previous.name, resolved.name)
        else:
            logger.info("Registered token decoder %s", resolved.name)
        return resolved

    def get(self) -> TokenDecoder | None:
        return self._decoder

    def clear(self) -> None:
        """Drop the registered decoder."""
        with self._write_lock:
            self._decoder = None

    @staticmethod
    def id_to_text(decoder: TokenDecoder, token_id: int) -> DecodeResult:
        """Decode *token_id* with *decoder*, never raising.

        Args:
            decoder: The decoder to delegate to.
            token_id: Vocabulary index.

        Returns:
            A successful :class:`DecodeResult` carrying the text, or a failed
            one carrying the error description.
        """
        try:
            text = decoder.id_to_text(token_id)
        except Exception as exc:  # Intentional: a bad token must not abort the report
            logger.debug("Decoder %s failed on token id %d: %s", decoder.name, token_id, exc)
            return DecodeResult.failure(token_id, str(exc) or type(exc).__name__)
        if text is None:
            return DecodeResult.failure(token_id, "decoder returned None")
        if isinstance(text, (bytearray, memoryview)):
            text = bytes(text)
        if not isinstance(text, (str, bytes)):
            logger.debug(
                "Decoder %s returned %s for token id %d",
                decoder.name,
                type(text).__name__,
                token_id,
            )
            return DecodeResult.failure(token_id, f"decoder returned {type(text).__name__}")
        return DecodeResult.success(token_id, text)


_global_registry: DecoderRegistry | None = None
_global_lock = threading.Lock()


def get_global_registry() -> DecoderRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _global_registry
    if _global_registry is None:
        with _global_lock:
            if _global_registry is None:
                _global_registry = DecoderRegistry()
    return _global_registry


def register_decoder(decoder: Any) -> TokenDecoder:
    """Register *decoder* with the process-wide registry."""
    return get_global_registry().register(decoder)


def get_decoder() -> TokenDecoder | None:
    """Return the decoder held by the process-wide registry, if any."""
    return get_global_registry().get()
