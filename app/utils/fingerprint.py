"""Checksum-style reduction of browser probe signals into short hex digests.

The browser page reduces canvas data URLs, WebGL capability strings and font
lists with the same routine before submitting them, so the server-side
version must produce byte-for-byte identical output. Digests are for display
and coarse deduplication only; they are not collision resistant.
"""

from __future__ import annotations

from typing import Iterable

_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _utf16_code_units(signal: str) -> Iterable[int]:
    """Yield UTF-16 code units, splitting astral characters into surrogates."""
    for char in signal:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


def _to_int32(value: int) -> int:
    value &= _UINT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def reduce_signal(signal: str) -> str:
    """Reduce ``signal`` to a lowercase hexadecimal digest.

    Runs ``acc = (acc << 5) - acc + code`` over the UTF-16 code units of the
    input, wrapping the accumulator to a signed 32-bit integer after every
    step, and renders the absolute value in hex.

    Args:
        signal: Any string, including the empty string.

    Returns:
        Hex digest without sign or leading zeros; ``"0"`` for empty input.

    Examples:
        >>> reduce_signal("")
        '0'
        >>> reduce_signal("a")
        '61'
        >>> reduce_signal("hello")
        '5e918d2'
    """
    acc = 0
    for code in _utf16_code_units(signal):
        acc = _to_int32((acc << 5) - acc + code)
    return format(abs(acc), "x")


def _utf16_sort_key(name: str) -> bytes:
    return name.encode("utf-16-be", "surrogatepass")


def font_fingerprint(font_names: Iterable[str]) -> str:
    """Digest of detected font names, independent of detection order.

    Names are ordered by UTF-16 code units, as the browser's default sort
    orders them, so astral characters sort below U+E000..U+FFFF.
    """
    return reduce_signal(",".join(sorted(set(font_names), key=_utf16_sort_key)))


def webgl_fingerprint(parts: Iterable[object]) -> str:
    """Digest of WebGL version, vendor, renderer, extensions and limits.

    Parts are joined with ``"|"`` in the order given.
    """
    return reduce_signal("|".join(str(part) for part in parts))
