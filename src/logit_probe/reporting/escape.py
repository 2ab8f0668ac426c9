"""Printable rendering of raw token text."""

from __future__ import annotations

_NAMED_ESCAPES: dict[int, str] = {
    0x0A: "\\n",
    0x09: "\\t",
    0x0D: "\\r",
}

_PRINTABLE_MIN = 32
_PRINTABLE_MAX = 126


def escape_token_text(text: str | bytes) -> str:
    """Render *text* using printable ASCII only.

    Strings are encoded as UTF-8 first, so every non-ASCII character shows
    up as its individual bytes. Lone surrogates, which byte-level
    vocabularies can produce, are encoded as their raw UTF-8 bytes. Newline,
    tab and carriage return use their C-style escapes; every other byte
    outside 32..126 becomes ``\\xHH``.

    Args:
        text: Decoded token as returned by a decoder.

    Returns:
        An ASCII string with no control characters.
    """
    raw = text.encode("utf-8", errors="surrogatepass") if isinstance(text, str) else bytes(text)
    parts: list[str] = []
    for byte in raw:
        named = _NAMED_ESCAPES.get(byte)
        if named is not None:
            parts.append(named)
        elif _PRINTABLE_MIN <= byte <= _PRINTABLE_MAX:
            parts.append(chr(byte))
        else:
            parts.append(f"\\x{byte:02x}")
    return "".join(parts)
