"""The Merkle tree and its query surface."""

from __future__ import annotations

import hashlib
from typing import Any, Callable, Dict, List, Optional, Sequence

from merkle_proofs.types import HashFn, LeafValue, buffer_to_hex, to_buffer, wrap_hash_fn

from . import multiproof
from .layers import Layer, build_layers, root_of
from .options import TreeOptions
from .proof import Proof, get_proof, verify_proof

FLAT_LAYERS_SENTINEL = b"\x00"
"""Placeholder at position 0 of flattened layers, so node `i` sits at `flat[i]`."""


def sha256(data: bytes) -> bytes:
    """Default hash function."""
    return hashlib.sha256(data).digest()


class MerkleTree:
    """
    A Merkle tree built once from a sequence of leaves.

    All leaves and nodes are stored as `bytes`. By default a lonely node at the
    end of an odd layer is promoted to the next layer without being hashed
    again; `duplicate_odd` and Bitcoin mode pair it with itself instead.

    The tree is never modified after construction. Accessors return new lists.

    Example::

        leaves = [sha256(x) for x in (b"a", b"b", b"c")]
        tree = MerkleTree(leaves, sha256, sort_pairs=True)
        proof = tree.get_proof(leaves[1])
        assert tree.verify(proof, leaves[1], tree.get_root())
    """

    def __init__(
        self,
        leaves: Sequence[LeafValue],
        hash_fn: Callable[[bytes], Any] = sha256,
        options: Optional[TreeOptions] = None,
        **option_kwargs: bool,
    ) -> None:
        """
        Build the tree.

        Args:
            leaves: Leaf values; see `to_buffer` for the accepted kinds.
            hash_fn: Hash over bytes; may return bytes, a hex digest or an int.
            options: Construction options. Mutually exclusive with `option_kwargs`.
            option_kwargs: Fields of `TreeOptions`, in snake or camel case.
        """
        if options is not None and option_kwargs:
            raise TypeError("Pass either options or option keyword arguments, not both")
        self._options = options if options is not None else TreeOptions(**option_kwargs)
        self._hash_fn: HashFn = wrap_hash_fn(hash_fn)
        self._layers = build_layers(leaves, self._hash_fn, self._options)

    def __len__(self) -> int:
        """Number of leaves."""
        return len(self._layers[0])

    def __repr__(self) -> str:
        return f"MerkleTree(leaves={len(self)}, root={self.get_hex_root()})"

    @property
    def options(self) -> TreeOptions:
        """The options the tree was built with."""
        return self._options

    @property
    def hash_fn(self) -> HashFn:
        """The normalized hash function."""
        return self._hash_fn

    @property
    def leaves(self) -> List[bytes]:
        """The leaf layer, after optional hashing and sorting."""
        return list(self._layers[0])

    @property
    def layers(self) -> List[Layer]:
        """All layers, leaves first and root last."""
        return self.get_layers()

    def get_leaves(self, values: Optional[Sequence[LeafValue]] = None) -> List[bytes]:
        """
        Return the leaves, optionally restricted to those matching `values`.

        When leaves are hashed at construction, `values` are hashed the same way
        before matching.
        """
        if values is None:
            return self.leaves
        wanted = [to_buffer(value) for value in values]
        if self._options.hash_leaves:
            wanted = [self._hash_fn(value) for value in wanted]
        return [leaf for leaf in self._layers[0] if leaf in wanted]

    def get_hex_leaves(self) -> List[str]:
        """Return the leaves as hex strings."""
        return [buffer_to_hex(leaf) for leaf in self._layers[0]]

    def get_layers(self) -> List[Layer]:
        """Return all layers, leaves first and root last."""
        return [list(layer) for layer in self._layers]

    def get_hex_layers(self) -> List[List[str]]:
        """Return all layers as hex strings."""
        return [[buffer_to_hex(node) for node in layer] for layer in self._layers]

    def get_layers_flat(self) -> List[bytes]:
        """
        Return all nodes in one list, root layer first and leaf layer last.

        A single zero byte sentinel occupies position 0, so for a complete tree
        the node at generalized index `i` is at position `i`.
        """
        flat = [FLAT_LAYERS_SENTINEL]
        for layer in reversed(self._layers):
            flat.extend(layer)
        return flat

    def get_hex_layers_flat(self) -> List[str]:
        """Return the flattened layers as hex strings."""
        return [buffer_to_hex(node) for node in self.get_layers_flat()]

    def get_root(self) -> bytes:
        """Return the root, or `b""` for an empty tree."""
        return root_of(self._layers)

    def get_hex_root(self) -> str:
        """Return the root as a hex string."""
        return buffer_to_hex(self.get_root())

    def get_depth(self) -> int:
        """Return the number of layers above the leaves."""
        return len(self._layers) - 1

    def get_proof(self, leaf: LeafValue, index: Optional[int] = None) -> Proof:
        """
        Return the inclusion proof of `leaf`.

        Pass `index` when several leaves hold the same value.
        """
        return get_proof(self._layers, leaf, self._options, index)

    def get_hex_proof(self, leaf: LeafValue, index: Optional[int] = None) -> List[str]:
        """Return the proof's sibling nodes as hex strings, without positions."""
        return [buffer_to_hex(node.data) for node in self.get_proof(leaf, index)]

    def get_proof_indices(self, tree_indices: Sequence[int], depth: int) -> List[int]:
        """See `multiproof.compute_proof_indices`."""
        return multiproof.compute_proof_indices(tree_indices, depth)

    def get_multi_proof(self, indices: Sequence[int]) -> List[bytes]:
        """Return the index-addressed multiproof of the leaves at `indices`."""
        return multiproof.get_multi_proof(self.get_layers_flat(), indices)

    def get_hex_multi_proof(self, indices: Sequence[int]) -> List[str]:
        """Return the index-addressed multiproof as hex strings."""
        return [buffer_to_hex(node) for node in self.get_multi_proof(indices)]

    def get_multi_proof_for_leaves(self, values: Sequence[LeafValue]) -> List[bytes]:
        """
        Return the multiproof of the leaves equal to `values`.

        Raises:
            LeafNotFoundError: If a value matches no leaf.
        """
        return multiproof.get_multi_proof_by_value(
            self._layers, values, sort_pairs=self._options.sorts_pairs
        )

    def get_proof_flags(
        self, leaves: Sequence[LeafValue], proof: Sequence[LeafValue]
    ) -> List[bool]:
        """
        Return the proof flags for `leaves` and their multiproof.

        Raises:
            LeafNotFoundError: If a leaf is not in the tree.
        """
        return multiproof.get_proof_flags(self._layers, leaves, proof)

    def verify(self, proof: Any, target: Optional[LeafValue], root: Optional[LeafValue]) -> bool:
        """Return whether `proof` connects `target` to `root` under this tree's rules."""
        return verify_proof(proof, target, root, self._hash_fn, self._options)

    def verify_multi_proof(
        self,
        root: LeafValue,
        indices: Sequence[int],
        leaves: Sequence[LeafValue],
        depth: int,
        proof: Sequence[LeafValue],
    ) -> bool:
        """Return whether an index-addressed multiproof reduces to `root`."""
        return multiproof.verify_multi_proof(root, indices, leaves, depth, proof, self._hash_fn)

    def verify_multi_proof_with_flags(
        self,
        root: LeafValue,
        leaves: Sequence[LeafValue],
        proof: Sequence[LeafValue],
        proof_flags: Sequence[bool],
    ) -> bool:
        """Return whether a flag-driven multiproof reduces to `root`."""
        return multiproof.verify_multi_proof_with_flags(
            root, leaves, proof, proof_flags, self._hash_fn
        )

    def get_layers_as_object(self) -> Dict[str, Any]:
        """
        Return the tree as nested dicts keyed by hex node values.

        Each node maps to a dict of its children; leaves map to `None`. An empty
        tree yields an empty dict.
        """
        pending: List[Dict[str, Any]] = []
        for layer in self._layers:
            objs: List[Dict[str, Any]] = []
            for node in layer:
                key = node.hex()
                if not pending:
                    objs.append({key: None})
                    continue
                children: Dict[str, Any] = {}
                for _ in range(2):
                    if pending:
                        children.update(pending.pop(0))
                objs.append({key: children})
            pending.extend(objs)
        return pending[0] if pending else {}
