"""Merkle tree building logic."""

from __future__ import annotations

import logging
from typing import List, Sequence

from merkle_proofs.types import HashFn, LeafValue, reverse, to_buffer

from .options import TreeOptions

logger = logging.getLogger(__name__)

Layer = List[bytes]
"""The nodes of one tree depth, left to right."""


def combine(left: bytes, right: bytes, hash_fn: HashFn, options: TreeOptions) -> bytes:
    """
    Combine two sibling nodes into their parent.

    In Bitcoin mode both nodes are byte-reversed, hashed twice and the digest is
    reversed back. Otherwise the pair is concatenated and hashed once. With
    pair sorting the smaller operand goes first.
    """
    if options.is_bitcoin_tree:
        pair = [reverse(left), reverse(right)]
    else:
        pair = [left, right]

    if options.sorts_pairs:
        pair.sort()

    digest = hash_fn(b"".join(pair))
    if options.is_bitcoin_tree:
        digest = reverse(hash_fn(digest))
    return digest


def prepare_leaves(
    leaves: Sequence[LeafValue], hash_fn: HashFn, options: TreeOptions
) -> Layer:
    """Normalize the input leaves, hashing and sorting them as configured."""
    prepared = [to_buffer(leaf) for leaf in leaves]
    if options.hash_leaves:
        prepared = [hash_fn(leaf) for leaf in prepared]
    if options.sorts_leaves:
        # Unsigned byte-wise ordering
        prepared.sort()
    return prepared


def next_layer(nodes: Layer, hash_fn: HashFn, options: TreeOptions) -> Layer:
    """Build the parent layer of `nodes`."""
    parents: Layer = []
    for i in range(0, len(nodes), 2):
        left = nodes[i]
        if i + 1 == len(nodes):
            # Lonely last node of an odd layer.
            if not options.is_bitcoin_tree and not options.duplicate_odd:
                parents.append(left)
                continue
            right = left
        else:
            right = nodes[i + 1]
        parents.append(combine(left, right, hash_fn, options))
    return parents


def build_layers(
    leaves: Sequence[LeafValue], hash_fn: HashFn, options: TreeOptions
) -> List[Layer]:
    r"""
    Build every layer of the tree, leaves first and root last.

    An empty input yields a single empty layer.
    """
    layers = [prepare_leaves(leaves, hash_fn, options)]
    while len(layers[-1]) > 1:
        layers.append(next_layer(layers[-1], hash_fn, options))

    logger.debug(
        "Built Merkle tree: %d leaves, depth %d, bitcoin=%s duplicate_odd=%s sort_pairs=%s",
        len(layers[0]),
        len(layers) - 1,
        options.is_bitcoin_tree,
        options.duplicate_odd,
        options.sorts_pairs,
    )
    return layers


def root_of(layers: Sequence[Layer]) -> bytes:
    """Return the root of `layers`, or `b""` for an empty tree."""
    top = layers[-1]
    return top[0] if top else b""
