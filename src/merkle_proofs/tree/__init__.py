"""Merkle tree construction, single proofs and multiproofs."""

from .gindex import GeneralizedIndex
from .layers import build_layers, combine
from .merkle_tree import MerkleTree, sha256
from .multiproof import (
    compute_proof_indices,
    get_multi_proof,
    get_multi_proof_by_value,
    get_proof_flags,
    process_multi_proof,
    verify_multi_proof,
    verify_multi_proof_with_flags,
)
from .options import TreeOptions
from .proof import Position, Proof, ProofNode, get_proof, verify_proof

__all__ = [
    "GeneralizedIndex",
    "MerkleTree",
    "Position",
    "Proof",
    "ProofNode",
    "TreeOptions",
    "build_layers",
    "combine",
    "compute_proof_indices",
    "get_multi_proof",
    "get_multi_proof_by_value",
    "get_proof",
    "get_proof_flags",
    "process_multi_proof",
    "sha256",
    "verify_multi_proof",
    "verify_multi_proof_with_flags",
    "verify_proof",
]
