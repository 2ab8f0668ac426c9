"""Token decoding subsystem for logit-probe.

Holds the optional token-id -> text capability that verbose reports use,
behind a process-wide, publish-once/read-many registry.
"""

from logit_probe.decoding.adapters import (
    CallableDecoder,
    TokenizerDecoder,
    VocabularyDecoder,
    as_decoder,
)
from logit_probe.decoding.base import DecodeResult, TokenDecoder
from logit_probe.decoding.registry import (
    DecoderRegistry,
    get_decoder,
    get_global_registry,
    register_decoder,
)

__all__ = [
    "CallableDecoder",
    "DecodeResult",
    "DecoderRegistry",
    "TokenDecoder",
    "TokenizerDecoder",
    "VocabularyDecoder",
    "as_decoder",
    "get_decoder",
    "get_global_registry",
    "register_decoder",
]
