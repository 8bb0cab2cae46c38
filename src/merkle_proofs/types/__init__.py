"""Base types, byte normalization and errors."""

from .base import CamelModel, StrictBaseModel
from .buffer import (
    HashFn,
    LeafValue,
    buffer_to_hex,
    is_hex_like,
    reverse,
    to_buffer,
    wrap_hash_fn,
)
from .exceptions import BufferCoercionError, LeafNotFoundError, MerkleError

__all__ = [
    "BufferCoercionError",
    "CamelModel",
    "HashFn",
    "LeafNotFoundError",
    "LeafValue",
    "MerkleError",
    "StrictBaseModel",
    "buffer_to_hex",
    "is_hex_like",
    "reverse",
    "to_buffer",
    "wrap_hash_fn",
]
