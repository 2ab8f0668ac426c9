"""Tests for DecoderRegistry and the process-wide accessors."""

from __future__ import annotations

import logging
import threading

import pytest

from logit_probe.decoding import registry as registry_module
from logit_probe.decoding.adapters import CallableDecoder, VocabularyDecoder
from logit_probe.decoding.base import TokenDecoder
from logit_probe.decoding.registry import (
    DecoderRegistry,
    get_decoder,
    get_global_registry,
    register_decoder,
)
from logit_probe.exceptions import DecodeError


class _NoneDecoder(TokenDecoder):
    """Decoder that breaks its contract by returning None."""

    @property
    def name(self) -> str:
        return "none"

    def id_to_text(self, token_id: int) -> str:
        return None  # type: ignore[return-value]


class TestDecoderRegistry:
    """Tests for an isolated registry instance."""

    def test_unset_by_default(self, registry: DecoderRegistry) -> None:
        assert registry.get() is None

    def test_register_and_get(
        self, registry: DecoderRegistry, vocab_decoder: VocabularyDecoder
    ) -> None:
        stored = registry.register(vocab_decoder)
        assert stored is vocab_decoder
        assert registry.get() is vocab_decoder

    def test_last_write_wins(self, registry: DecoderRegistry) -> None:
        first = VocabularyDecoder(["a"])
        second = VocabularyDecoder(["b"])
        registry.register(first)
        registry.register(second)
        assert registry.get() is second

    def test_register_is_idempotent(
        self, registry: DecoderRegistry, vocab_decoder: VocabularyDecoder
    ) -> None:
        registry.register(vocab_decoder)
        registry.register(vocab_decoder)
        assert registry.get() is vocab_decoder

    def test_register_coerces_vocab_list(self, registry: DecoderRegistry) -> None:
        stored = registry.register(["x", "y"])
        assert isinstance(stored, VocabularyDecoder)
        assert registry.get() is stored

    def test_clear(self, registry: DecoderRegistry, vocab_decoder: VocabularyDecoder) -> None:
        registry.register(vocab_decoder)
        registry.clear()
        assert registry.get() is None

    def test_register_logs(
        self,
        registry: DecoderRegistry,
        vocab_decoder: VocabularyDecoder,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="logit_probe"):
            registry.register(vocab_decoder)
            registry.register(CallableDecoder(str, name="other"))
        messages = [r.message for r in caplog.records]
        assert "Registered token decoder vocabulary" in messages
        assert "Replaced token decoder vocabulary with other" in messages

    def test_instances_are_independent(self, vocab_decoder: VocabularyDecoder) -> None:
        a = DecoderRegistry()
        b = DecoderRegistry()
        a.register(vocab_decoder)
        assert b.get() is None

    def test_concurrent_readers_see_whole_values(self, registry: DecoderRegistry) -> None:
        """Readers racing a writer only ever see None or a registered decoder."""
        decoders = [VocabularyDecoder([str(i)]) for i in range(50)]
        allowed = {id(d) for d in decoders}
        seen_bad: list[object] = []
        stop = threading.Event()

        def reader() -> None:
            while not stop.is_set():
                current = registry.get()
                if current is not None and id(current) not in allowed:
                    seen_bad.append(current)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for d in decoders:
            registry.register(d)
        stop.set()
        for t in threads:
            t.join()

        assert seen_bad == []
        assert registry.get() is decoders[-1]


class TestIdToText:
    """Tests for the non-raising decode path."""

    def test_success(self, vocab_decoder: VocabularyDecoder) -> None:
        result = DecoderRegistry.id_to_text(vocab_decoder, 1)
        assert result.ok
        assert result.text == "the"
        assert result.token_id == 1

    def test_decode_error_becomes_failure(self, vocab_decoder: VocabularyDecoder) -> None:
        result = DecoderRegistry.id_to_text(vocab_decoder, 99)
        assert not result.ok
        assert result.text is None
        assert "out of range" in (result.error or "")

    def test_unexpected_exception_becomes_failure(self) -> None:
        class Exploding(TokenDecoder):
            @property
            def name(self) -> str:
                return "exploding"

            def id_to_text(self, token_id: int) -> str:
                raise RuntimeError("kaboom")

        result = DecoderRegistry.id_to_text(Exploding(), 0)
        assert not result.ok
        assert result.error == "kaboom"

    def test_none_text_becomes_failure(self) -> None:
        result = DecoderRegistry.id_to_text(_NoneDecoder(), 0)
        assert not result.ok

    def test_non_text_result_becomes_failure(self) -> None:
        result = DecoderRegistry.id_to_text(CallableDecoder(lambda token_id: 1.5), 0)
        assert not result.ok
        assert result.error == "decoder returned float"

    def test_bytearray_result_is_bytes(self) -> None:
        result = DecoderRegistry.id_to_text(CallableDecoder(lambda token_id: bytearray(b"ab")), 0)
        assert result.ok
        assert result.text == b"ab"

    def test_failure_logged_at_debug(
        self, vocab_decoder: VocabularyDecoder, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="logit_probe"):
            DecoderRegistry.id_to_text(vocab_decoder, -1)
        assert any(r.levelno == logging.DEBUG for r in caplog.records)

    def test_decode_error_is_not_raised(self) -> None:
        def always_fail(token_id: int) -> str:
            raise DecodeError("nope")

        result = DecoderRegistry.id_to_text(CallableDecoder(always_fail), 0)
        assert result.error == "nope"


class TestGlobalRegistry:
    """Tests for the lazily created process-wide registry."""

    def setup_method(self) -> None:
        """Save the global registry before each test."""
        self._saved = registry_module._global_registry
        registry_module._global_registry = None

    def teardown_method(self) -> None:
        """Restore the global registry after each test."""
        registry_module._global_registry = self._saved

    def test_lazily_created_singleton(self) -> None:
        first = get_global_registry()
        assert get_global_registry() is first

    def test_module_level_helpers(self, vocab_decoder: VocabularyDecoder) -> None:
        assert get_decoder() is None
        register_decoder(vocab_decoder)
        assert get_decoder() is vocab_decoder
        assert get_global_registry().get() is vocab_decoder
