"""Concrete decoders wrapping common tokenizer shapes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from logit_probe.decoding.base import TokenDecoder
from logit_probe.exceptions import DecodeError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


class VocabularyDecoder(TokenDecoder):
    """Decoder backed by an in-memory id -> token list.

    Args:
        vocab: Token strings indexed by id.
    """

    def __init__(self, vocab: Sequence[str | bytes]) -> None:
        self._vocab = list(vocab)

    @property
    def name(self) -> str:
        return "vocabulary"

    def __len__(self) -> int:
        return len(self._vocab)

    def id_to_text(self, token_id: int) -> str | bytes:
        if not 0 <= token_id < len(self._vocab):
            raise DecodeError(f"Token id {token_id} out of range [0, {len(self._vocab)})")
        return self._vocab[token_id]


class TokenizerDecoder(TokenDecoder):
    """Decoder wrapping a Hugging Face style tokenizer.

    Prefers ``convert_ids_to_tokens`` so reports show the raw vocabulary
    entry (``'Ġthe'``, ``'<0x0A>'``), and falls back to ``decode([id])``
    for tokenizers that only expose decoding.

    Args:
        tokenizer: Any object exposing ``convert_ids_to_tokens`` or ``decode``.
    """

    def __init__(self, tokenizer: Any) -> None:
        if not (hasattr(tokenizer, "convert_ids_to_tokens") or hasattr(tokenizer, "decode")):
            raise TypeError(
                f"{type(tokenizer).__name__} has neither convert_ids_to_tokens() nor decode()"
            )
        self._tokenizer = tokenizer
        self._vocab_size: int | None = self._extract_vocab_size(tokenizer)

    @staticmethod
    def _extract_vocab_size(tokenizer: Any) -> int | None:
        try:
            return len(tokenizer)
        except TypeError:
            pass
        size = getattr(tokenizer, "vocab_size", None)
        return int(size) if size is not None else None

    @property
    def name(self) -> str:
        return f"tokenizer:{type(self._tokenizer).__name__}"

    def id_to_text(self, token_id: int) -> str | bytes:
        if token_id < 0 or (self._vocab_size is not None and token_id >= self._vocab_size):
            raise DecodeError(f"Token id {token_id} out of range for {self.name}")

        try:
            if hasattr(self._tokenizer, "convert_ids_to_tokens"):
                text = self._tokenizer.convert_ids_to_tokens(token_id)
            else:
                text = self._tokenizer.decode([token_id])
        except DecodeError:
            raise
        except Exception as exc:  # Tokenizer backends raise arbitrary types.
            raise DecodeError(f"{self.name} failed on token id {token_id}: {exc}") from exc

        if text is None:
            raise DecodeError(f"{self.name} has no token for id {token_id}")
        return text


class CallableDecoder(TokenDecoder):
    """Decoder wrapping a plain ``int -> str`` function.

    Args:
        fn: Mapping function. Its exceptions become ``DecodeError``.
        name: Identifier reported by :attr:`name`.
    """

    def __init__(self, fn: Callable[[int], str | bytes], name: str = "callable") -> None:
        self._fn = fn
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def id_to_text(self, token_id: int) -> str | bytes:
        try:
            return self._fn(token_id)
        except DecodeError:
            raise
        except Exception as exc:  # Arbitrary user callable.
            raise DecodeError(f"{self._name} failed on token id {token_id}: {exc}") from exc


def as_decoder(obj: Any) -> TokenDecoder:
    """Coerce *obj* into a :class:`TokenDecoder`.

    Accepts an existing decoder, a tokenizer-like object, a sequence of
    token strings, or a callable.

    Raises:
        TypeError: If *obj* matches none of the supported shapes.
    """
    if isinstance(obj, TokenDecoder):
        return obj
    if hasattr(obj, "convert_ids_to_tokens") or hasattr(obj, "decode"):
        return TokenizerDecoder(obj)
    if isinstance(obj, (list, tuple)):
        return VocabularyDecoder(obj)
    if callable(obj):
        return CallableDecoder(obj)
    raise TypeError(f"Cannot use {type(obj).__name__} as a token decoder")
