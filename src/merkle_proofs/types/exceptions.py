"""Exception hierarchy for Merkle tree construction and proofs."""

from __future__ import annotations

from typing import Any


class MerkleError(Exception):
    """
    Base exception for all Merkle tree errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


def _short_repr(value: Any) -> str:
    value_repr = repr(value)
    if len(value_repr) > 50:
        value_repr = value_repr[:47] + "..."
    return value_repr


class BufferCoercionError(MerkleError, TypeError):
    """
    Raised when a value cannot be normalized to a byte buffer.

    Attributes:
        actual_type: The type name of the rejected value.
        value: The rejected value.
    """

    def __init__(self, value: Any, detail: str | None = None) -> None:
        self.actual_type = type(value).__name__
        self.value = value

        msg = f"Cannot convert {self.actual_type} to bytes: {_short_repr(value)}"
        if detail:
            msg = f"{msg} ({detail})"

        super().__init__(msg)


class LeafNotFoundError(MerkleError, LookupError):
    """
    Raised when a value-addressed target has no matching leaf in the tree.

    A missing target would silently corrupt a multiproof, so lookups by value
    never skip unknown leaves.

    Attributes:
        leaf: The normalized target that was not found.
    """

    def __init__(self, leaf: bytes) -> None:
        self.leaf = leaf
        super().__init__(f"Element does not exist in Merkle tree: 0x{leaf.hex()}")
