"""Test helpers for merkle_proofs tests."""

from .builders import make_leaves, reference_bitcoin_root, tamper

__all__ = [
    "make_leaves",
    "reference_bitcoin_root",
    "tamper",
]
