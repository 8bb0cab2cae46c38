"""
Merkle multiproofs.

Index-addressed multiproofs work on the generalized index space of a complete
binary tree: leaf `i` of a depth `d` tree sits at `2**d + i`, the parent of
`k` is `k // 2` and its sibling is `k ^ 1`. The helpers here do not need a
tree instance; `MerkleTree` delegates to them.

Value-addressed multiproofs and proof flags walk the stored layers instead and
serve verifiers that consume a flat proof plus one flag per hashing step.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence, Set, Tuple

from merkle_proofs.types import HashFn, LeafNotFoundError, LeafValue, MerkleError, to_buffer

from .gindex import GeneralizedIndex
from .layers import Layer
from .proof import find_leaf

logger = logging.getLogger(__name__)

MultiProof = List[bytes]
"""The helper nodes of a multiproof, without positional tags."""

Address = Tuple[int, int]
"""A node position as (layer number, index within the layer)."""


def compute_proof_indices(tree_indices: Sequence[int], depth: int) -> List[int]:
    """
    Compute the generalized indices of the helper nodes proving `tree_indices`.

    Candidates are the target leaves in input order followed by every sibling
    on their paths, deepest first. A candidate is emitted unless it can already
    be derived; emitting it marks it and each ancestor whose sibling is also
    covered. Target leaves are dropped from the result since the verifier
    receives them directly.
    """
    targets = [GeneralizedIndex.leaf(depth, i) for i in tree_indices]

    siblings: Set[int] = set()
    for target in targets:
        siblings.update(branch.value for branch in target.get_branch_indices())

    candidates = targets + [GeneralizedIndex(value=v) for v in sorted(siblings, reverse=True)]

    redundant: Set[int] = set()
    emitted: List[int] = []
    for candidate in candidates:
        if candidate.value in redundant:
            continue
        emitted.append(candidate.value)
        node = candidate
        while node.value > 1:
            redundant.add(node.value)
            if node.sibling.value not in redundant:
                break
            node = node.parent

    target_values = {target.value for target in targets}
    return [index for index in emitted if index not in target_values]


def depth_of_flat_tree(flat_tree: Sequence[Any]) -> int:
    """Return the depth of a flattened complete tree (`flat[i]` is node `i`)."""
    return max(len(flat_tree) // 2, 1).bit_length() - 1


def get_multi_proof(flat_tree: Sequence[bytes], indices: Sequence[int]) -> MultiProof:
    """
    Return the multiproof for leaf `indices` of a flattened complete tree.

    `flat_tree[i]` must hold the node at generalized index `i`, with a
    placeholder at position 0 (see `MerkleTree.get_layers_flat`).
    """
    depth = depth_of_flat_tree(flat_tree)
    return [to_buffer(flat_tree[i]) for i in compute_proof_indices(indices, depth)]


def verify_multi_proof(
    root: LeafValue,
    indices: Sequence[int],
    leaves: Sequence[LeafValue],
    depth: int,
    proof: Sequence[LeafValue],
    hash_fn: HashFn,
) -> bool:
    """
    Return whether `leaves` at `indices` and `proof` reduce to `root`.

    Known nodes are kept in a sparse map keyed by generalized index. Nodes are
    visited in ascending order; whenever a node and its sibling are both known
    their parent is computed, lower address on the left, and queued in turn.
    An empty set of indices verifies trivially. Malformed input (wrong shapes
    or types, values that cannot be normalized, addresses outside the tree)
    fails verification instead of raising.
    """
    if not all(isinstance(arg, (list, tuple)) for arg in (indices, leaves, proof)):
        logger.debug("Multiproof rejected: indices, leaves and proof must be lists")
        return False
    if not isinstance(depth, int) or not all(isinstance(index, int) for index in indices):
        logger.debug("Multiproof rejected: depth and indices must be integers")
        return False
    if len(indices) != len(leaves):
        logger.debug("Multiproof rejected: %d indices for %d leaves", len(indices), len(leaves))
        return False
    try:
        expected = to_buffer(root)
        helpers = compute_proof_indices(indices, depth)
        tree: Dict[int, bytes] = {
            GeneralizedIndex.leaf(depth, index).value: to_buffer(leaf)
            for index, leaf in zip(indices, leaves)
        }
        for index, node in zip(helpers, proof):
            tree[index] = to_buffer(node)
    except (MerkleError, TypeError, ValueError) as e:
        logger.debug("Multiproof rejected: %s", e)
        return False

    queue = sorted(tree)[:-1]
    pos = 0
    while pos < len(queue):
        node = GeneralizedIndex(value=queue[pos])
        pos += 1
        if node.value < 2:
            continue
        sibling, parent = node.sibling, node.parent
        # A parent supplied by the proof is kept as given.
        if sibling.value in tree and parent.value not in tree:
            left, right = (sibling, node) if node.is_right else (node, sibling)
            tree[parent.value] = hash_fn(tree[left.value] + tree[right.value])
            queue.append(parent.value)

    return not indices or tree.get(1) == expected


def _resolve_ids(leaves: Sequence[bytes], targets: Sequence[bytes]) -> List[int]:
    ids = []
    for target in targets:
        index = find_leaf(leaves, target)
        if index == -1:
            logger.debug("Leaf lookup missed: 0x%s", target.hex())
            raise LeafNotFoundError(target)
        ids.append(index)
    return sorted(ids)


def _pair_index(layer: Layer, index: int) -> int | None:
    pair_index = index + 1 if index % 2 == 0 else index - 1
    return pair_index if pair_index < len(layer) else None


def get_multi_proof_by_value(
    layers: Sequence[Layer], targets: Sequence[LeafValue], sort_pairs: bool = False
) -> MultiProof:
    """
    Return the multiproof for the leaves equal to `targets`.

    Each layer contributes the sibling of every live node; the parents become
    the next layer's live nodes. Siblings that are themselves live nodes are
    dropped, comparing positions rather than byte values so that equal hashes
    at different positions are kept.

    Raises:
        LeafNotFoundError: If a target matches no leaf.
    """
    elements = [to_buffer(target) for target in targets]
    if sort_pairs:
        elements.sort()
    ids = _resolve_ids(layers[0], elements)

    visited: Set[Address] = set()
    collected: List[Tuple[Address, bytes]] = []
    for depth, layer in enumerate(layers):
        next_ids: List[int] = []
        for index in ids:
            visited.add((depth, index))
            pair_index = _pair_index(layer, index)
            if pair_index is not None:
                collected.append(((depth, pair_index), layer[pair_index]))
            parent = index // 2
            if parent not in next_ids:
                next_ids.append(parent)
        ids = next_ids

    return [node for address, node in collected if address not in visited]


def get_proof_flags(
    layers: Sequence[Layer], targets: Sequence[LeafValue], proof: Sequence[LeafValue]
) -> List[bool]:
    """
    Compute one flag per hashing step of a flag-driven multiproof verifier.

    `True` means the step's sibling is derived from already known values,
    `False` means it is read from `proof`. A pair is only tested once, from
    whichever side is reached first.

    Raises:
        LeafNotFoundError: If a target matches no leaf.
    """
    proof_nodes = {to_buffer(node) for node in proof}
    ids = _resolve_ids(layers[0], [to_buffer(target) for target in targets])

    tested: Set[Address] = set()
    flags: List[bool] = []
    for depth, layer in enumerate(layers):
        next_ids: List[int] = []
        for index in ids:
            if (depth, index) not in tested:
                pair_index = _pair_index(layer, index)
                tested.add((depth, index))
                if pair_index is not None:
                    proof_used = layer[index] in proof_nodes or layer[pair_index] in proof_nodes
                    flags.append(not proof_used)
                    tested.add((depth, pair_index))
            next_ids.append(index // 2)
        ids = next_ids
    return flags


def process_multi_proof(
    leaves: Sequence[LeafValue],
    proof: Sequence[LeafValue],
    proof_flags: Sequence[bool],
    hash_fn: HashFn,
) -> bytes:
    """
    Rebuild the root from leaves, helper nodes and proof flags.

    Leaves must be in tree order. Values are consumed from a queue holding the
    leaves followed by each computed hash; a `True` flag pairs two queued values,
    a `False` flag pairs a queued value with the next proof element. Pairs are
    hashed in sorted order, so this only reproduces roots of pair-sorted trees.

    Raises:
        ValueError: If the number of flags does not match leaves and proof.
    """
    queue = [to_buffer(leaf) for leaf in leaves]
    helpers = [to_buffer(node) for node in proof]
    total = len(proof_flags)
    if len(queue) + len(helpers) - 1 != total:
        raise ValueError("Proof flags do not match the number of leaves and proof nodes.")

    leaf_count = len(queue)
    helper_pos = 0
    pos = 0
    for flag in proof_flags:
        a = queue[pos]
        pos += 1
        if flag:
            b = queue[pos]
            pos += 1
        else:
            b = helpers[helper_pos]
            helper_pos += 1
        queue.append(hash_fn(b"".join(sorted((a, b)))))

    if total:
        return queue[-1]
    if leaf_count:
        return queue[0]
    return helpers[0]


def verify_multi_proof_with_flags(
    root: LeafValue,
    leaves: Sequence[LeafValue],
    proof: Sequence[LeafValue],
    proof_flags: Sequence[bool],
    hash_fn: HashFn,
) -> bool:
    """Return whether a flag-driven multiproof reduces to `root`."""
    try:
        return process_multi_proof(leaves, proof, proof_flags, hash_fn) == to_buffer(root)
    except (MerkleError, ValueError, IndexError) as e:
        logger.debug("Flag multiproof rejected: %s", e)
        return False
