"""Merkle trees with single-leaf proofs, multiproofs and Bitcoin-style trees."""

from .tree import (
    MerkleTree,
    Position,
    ProofNode,
    TreeOptions,
    compute_proof_indices,
    get_multi_proof,
    verify_multi_proof,
)
from .types import (
    BufferCoercionError,
    LeafNotFoundError,
    MerkleError,
    buffer_to_hex,
    is_hex_like,
    to_buffer,
    wrap_hash_fn,
)

__all__ = [
    "BufferCoercionError",
    "LeafNotFoundError",
    "MerkleError",
    "MerkleTree",
    "Position",
    "ProofNode",
    "TreeOptions",
    "buffer_to_hex",
    "compute_proof_indices",
    "get_multi_proof",
    "is_hex_like",
    "to_buffer",
    "verify_multi_proof",
    "wrap_hash_fn",
]
