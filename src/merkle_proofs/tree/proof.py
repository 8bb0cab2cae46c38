"""Single-leaf inclusion proofs."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import Field

from merkle_proofs.types import HashFn, LeafValue, MerkleError, StrictBaseModel, to_buffer

from .layers import Layer, combine
from .options import TreeOptions

logger = logging.getLogger(__name__)


class Position(str, Enum):
    """Side of the accumulator on which a proof sibling is placed."""

    LEFT = "left"
    RIGHT = "right"


class ProofNode(StrictBaseModel):
    """One step of a single-leaf proof."""

    position: Optional[Position] = Field(
        default=None, description="Side of the sibling; None means implied by the tree mode."
    )

    data: bytes = Field(..., description="The sibling node.")


Proof = List[ProofNode]
"""A single-leaf proof, ordered from the leaf layer to the root."""


def find_leaf(leaves: Sequence[bytes], leaf: bytes) -> int:
    """Return the index of the first leaf equal to `leaf`, or -1."""
    for i, candidate in enumerate(leaves):
        if candidate == leaf:
            return i
    return -1


def get_proof(
    layers: Sequence[Layer],
    leaf: LeafValue,
    options: TreeOptions,
    index: Optional[int] = None,
) -> Proof:
    """
    Collect the siblings connecting a leaf to the root.

    When `index` is omitted it is resolved by the first leaf equal to `leaf`;
    trees holding duplicate leaves need an explicit index. Unknown leaves and
    out-of-range indices yield an empty proof.

    A lonely node that construction paired with itself (Bitcoin mode or
    `duplicate_odd`) contributes itself as a right-hand sibling. A lonely node
    promoted unchanged contributes nothing at that layer.

    In Bitcoin mode right-hand entries carry no `position` and are read as
    right-appended; left-hand entries stay tagged.
    """
    leaves = layers[0]
    if index is None:
        index = find_leaf(leaves, to_buffer(leaf))
    if index < 0 or index >= len(leaves):
        logger.debug("No proof: leaf index %d not in tree of %d leaves", index, len(leaves))
        return []

    pairs_lonely_node = options.is_bitcoin_tree or options.duplicate_odd
    right = None if options.is_bitcoin_tree else Position.RIGHT
    proof: Proof = []
    for layer in layers[:-1]:
        is_right_node = index % 2 == 1
        pair_index = index - 1 if is_right_node else index + 1
        if pair_index < len(layer):
            proof.append(
                ProofNode(
                    position=Position.LEFT if is_right_node else right,
                    data=layer[pair_index],
                )
            )
        elif pairs_lonely_node:
            proof.append(ProofNode(position=right, data=layer[index]))
        index //= 2
    return proof


def _read_entry(entry: Any, implied: Position) -> tuple[Position, bytes]:
    if isinstance(entry, ProofNode):
        return entry.position or implied, entry.data
    if isinstance(entry, Mapping):
        position = entry.get("position")
        return (Position(position) if position else implied), to_buffer(entry["data"])
    return implied, to_buffer(entry)


def verify_proof(
    proof: Any,
    target: Optional[LeafValue],
    root: Optional[LeafValue],
    hash_fn: HashFn,
    options: TreeOptions,
) -> bool:
    """
    Return whether `proof` connects `target` to `root`.

    Entries may be `ProofNode` objects, `{"position", "data"}` mappings or bare
    byte/hex values. Bare entries sit to the right of the accumulator in Bitcoin
    mode and to the left otherwise. With pair sorting, positions are ignored.

    Malformed input (not a list, empty, missing target or root, values that
    cannot be normalized) fails verification instead of raising.
    """
    if not isinstance(proof, (list, tuple)) or not proof:
        logger.debug("Proof rejected: expected a non-empty list, got %r", type(proof).__name__)
        return False
    if target is None or root is None:
        logger.debug("Proof rejected: missing target or root")
        return False

    implied = Position.RIGHT if options.is_bitcoin_tree else Position.LEFT
    try:
        node = to_buffer(target)
        expected = to_buffer(root)
        steps = [_read_entry(entry, implied) for entry in proof]
    except (MerkleError, KeyError, ValueError) as e:
        logger.debug("Proof rejected: %s", e)
        return False

    for position, sibling in steps:
        if position is Position.LEFT:
            node = combine(sibling, node, hash_fn, options)
        else:
            node = combine(node, sibling, hash_fn, options)
    return node == expected
