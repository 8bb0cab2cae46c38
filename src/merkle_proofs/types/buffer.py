"""
Byte buffer normalization.

Every leaf, node, root and proof element is handled internally as `bytes`.
This module is the single place where caller values are converted:

- `bytes` / `bytearray` / `memoryview` are copied as immutable `bytes`.
- Hex strings, with or without a `0x` prefix, are decoded. The trailing digit
  of an odd digit run is dropped (`"0x123"` -> `b"\\x12"`).
- Any other string is encoded as UTF-8.
- Non-negative integers become the bytes of their big-endian hex form, under
  the same odd digit rule.
- Sequences of integers in `[0, 255]` become those bytes.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Sequence, Union

from .exceptions import BufferCoercionError

LeafValue = Union[bytes, bytearray, memoryview, str, int, Sequence[int]]
"""Any value accepted where a byte buffer is expected."""

HashFn = Callable[[bytes], bytes]
"""A hash function over byte buffers."""

_HEX_RE = re.compile(r"^(0x)?[0-9A-Fa-f]*$")


def is_hex_like(value: Any) -> bool:
    """
    Return whether `value` is a string of hex digits with an optional `0x` prefix.

    The empty string and a bare `0x` both qualify.
    """
    return isinstance(value, str) and _HEX_RE.match(value) is not None


def _hex_to_bytes(digits: str) -> bytes:
    # Whole bytes only; a dangling last nibble is discarded.
    return bytes.fromhex(digits[: len(digits) - len(digits) % 2])


def to_buffer(value: LeafValue) -> bytes:
    """
    Normalize `value` to canonical `bytes`.

    Raises:
        BufferCoercionError: If `value` is not one of the supported kinds.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        if is_hex_like(value):
            return _hex_to_bytes(value.removeprefix("0x"))
        return value.encode("utf-8")
    if isinstance(value, bool):
        raise BufferCoercionError(value)
    if isinstance(value, int):
        if value < 0:
            raise BufferCoercionError(value, "negative integers have no byte form")
        return _hex_to_bytes(f"{value:x}")
    if isinstance(value, Sequence):
        try:
            # bytearray enforces that each element is an int in 0..255
            return bytes(bytearray(value))
        except (TypeError, ValueError) as e:
            raise BufferCoercionError(value, str(e)) from e
    raise BufferCoercionError(value)


def buffer_to_hex(value: bytes) -> str:
    """Return `value` as a `0x`-prefixed lowercase hex string."""
    return "0x" + value.hex()


def reverse(value: bytes) -> bytes:
    """Return the bytes of `value` in reverse order."""
    return value[::-1]


def wrap_hash_fn(fn: Callable[[bytes], Any]) -> HashFn:
    """
    Wrap a caller-supplied hash function so its output is always `bytes`.

    The wrapped function may return raw bytes, a hex digest or an integer;
    the result is passed through `to_buffer`.
    """

    def hash_fn(data: bytes) -> bytes:
        return to_buffer(fn(data))

    hash_fn.__wrapped__ = fn  # type: ignore[attr-defined]
    return hash_fn
