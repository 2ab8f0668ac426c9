"""Abstract base class and result type for token decoders.

A decoder maps a vocabulary index to the raw text of that token. Decoders
signal failure by raising :class:`~logit_probe.exceptions.DecodeError`; the
registry turns that into a failed :class:`DecodeResult` so the reporting
path never has to catch exceptions itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Outcome of decoding one token id.

    Attributes:
        token_id: The id that was decoded.
        text: Decoded token text, or ``None`` on failure.
        error: Failure description, or ``None`` on success.
    """

    token_id: int
    text: str | bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None

    @classmethod
    def success(cls, token_id: int, text: str | bytes) -> DecodeResult:
        return cls(token_id=token_id, text=text)

    @classmethod
    def failure(cls, token_id: int, error: str) -> DecodeResult:
        return cls(token_id=token_id, error=error)


class TokenDecoder(ABC):
    """Abstract base for token-id to text mappings."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable decoder identifier (e.g., ``'vocabulary'``)."""

    @abstractmethod
    def id_to_text(self, token_id: int) -> str | bytes:
        """Return the raw text of *token_id*.

        Bytes are accepted for byte-level vocabularies; the reporter escapes
        whatever it receives.

        Args:
            token_id: Vocabulary index.

        Returns:
            The token's text or raw bytes.

        Raises:
            DecodeError: If the id is invalid or decoding fails.
        """
