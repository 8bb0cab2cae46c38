"""Tests for index- and value-addressed multiproofs and proof flags."""

from itertools import permutations

import hypothesis.strategies as st
import pytest
from hypothesis import given
from typing_extensions import Any

from merkle_proofs.tree.merkle_tree import MerkleTree, sha256
from merkle_proofs.tree.multiproof import (
    compute_proof_indices,
    depth_of_flat_tree,
    get_multi_proof,
    process_multi_proof,
    verify_multi_proof,
    verify_multi_proof_with_flags,
)
from merkle_proofs.types.exceptions import LeafNotFoundError
from tests.merkle_proofs.helpers import make_leaves, tamper


@pytest.mark.parametrize("order", list(permutations([2, 5, 6])))
def test_compute_proof_indices_documented_set(order: tuple[int, ...]) -> None:
    """The helper set for leaves 2, 5 and 6 of a depth 4 tree is fixed."""
    assert compute_proof_indices(list(order), 4) == [23, 20, 19, 8, 3]


@pytest.mark.parametrize(
    "tree_indices, depth, expected",
    [
        ([], 3, []),
        ([0], 0, []),
        ([0], 2, [5, 3]),
        ([3], 2, [6, 2]),
        ([2, 3], 2, [2]),
        ([0, 1, 2, 3], 2, []),
        ([0, 2], 3, [11, 9, 3]),
    ],
)
def test_compute_proof_indices(tree_indices: list[int], depth: int, expected: list[int]) -> None:
    """Helper indices cover exactly what cannot be derived from the targets."""
    assert compute_proof_indices(tree_indices, depth) == expected


def test_depth_of_flat_tree() -> None:
    """Depth is read off the flattened length."""
    assert depth_of_flat_tree([b"\x00", b"r"]) == 0
    assert depth_of_flat_tree([b""] * 8) == 2
    assert depth_of_flat_tree([b""] * 32) == 4


@pytest.mark.parametrize(
    "indices",
    [[0], [15], [2, 5, 6], [6, 2, 5], [0, 1], [0, 15], [3, 4, 9, 10, 11], list(range(16))],
)
def test_multiproof_round_trip(sixteen_leaves: list[bytes], indices: list[int]) -> None:
    """A multiproof verifies the targeted leaves against the root."""
    tree = MerkleTree(sixteen_leaves, sha256)
    proof = tree.get_multi_proof(indices)
    targets = [sixteen_leaves[i] for i in indices]

    assert len(proof) == len(compute_proof_indices(indices, tree.get_depth()))
    assert tree.verify_multi_proof(tree.get_root(), indices, targets, tree.get_depth(), proof)


def test_multiproof_matches_static_helper(sixteen_leaves: list[bytes]) -> None:
    """The tree method and the free function over the flat layers agree."""
    tree = MerkleTree(sixteen_leaves, sha256)
    flat = tree.get_layers_flat()
    assert tree.get_multi_proof([2, 5, 6]) == get_multi_proof(flat, [2, 5, 6])
    assert get_multi_proof(flat, [2, 5, 6]) == [flat[i] for i in (23, 20, 19, 8, 3)]


def test_multiproof_tamper_detection(sixteen_leaves: list[bytes]) -> None:
    """Changing a single byte of any proof element breaks verification."""
    tree = MerkleTree(sixteen_leaves, sha256)
    indices = [2, 5, 6]
    targets = [sixteen_leaves[i] for i in indices]
    proof = tree.get_multi_proof(indices)
    root, depth = tree.get_root(), tree.get_depth()

    for i, node in enumerate(proof):
        for position in (0, len(node) - 1):
            tampered = list(proof)
            tampered[i] = tamper(node, position)
            assert verify_multi_proof(root, indices, targets, depth, tampered, sha256) is False


def test_multiproof_rejects_wrong_inputs(sixteen_leaves: list[bytes]) -> None:
    """Wrong roots, leaves or shapes fail without raising."""
    tree = MerkleTree(sixteen_leaves, sha256)
    indices = [1, 8]
    targets = [sixteen_leaves[i] for i in indices]
    proof = tree.get_multi_proof(indices)
    root, depth = tree.get_root(), tree.get_depth()

    assert verify_multi_proof(sha256(b"other"), indices, targets, depth, proof, sha256) is False
    assert verify_multi_proof(root, indices, targets[::-1], depth, proof, sha256) is False
    assert verify_multi_proof(root, indices, targets[:1], depth, proof, sha256) is False
    assert verify_multi_proof(root, indices, targets, depth, proof[:-1], sha256) is False
    missing_root: Any = None
    assert verify_multi_proof(missing_root, indices, targets, depth, proof, sha256) is False
    assert verify_multi_proof(root, [-20], targets[:1], depth, proof, sha256) is False


@pytest.mark.parametrize(
    "field, bad_value",
    [
        ("proof", None),
        ("proof", 7),
        ("indices", None),
        ("indices", ["1", "8"]),
        ("indices", [1.0, 8.0]),
        ("leaves", None),
        ("depth", None),
        ("depth", "4"),
        ("depth", -1),
    ],
)
def test_multiproof_rejects_wrong_types(
    sixteen_leaves: list[bytes], field: str, bad_value: Any
) -> None:
    """Arguments of the wrong shape or type fail verification instead of raising."""
    tree = MerkleTree(sixteen_leaves, sha256)
    indices = [1, 8]
    arguments: dict[str, Any] = {
        "root": tree.get_root(),
        "indices": indices,
        "leaves": [sixteen_leaves[i] for i in indices],
        "depth": tree.get_depth(),
        "proof": tree.get_multi_proof(indices),
        "hash_fn": sha256,
    }
    arguments[field] = bad_value
    assert verify_multi_proof(**arguments) is False


def test_multiproof_accepts_hex(sixteen_leaves: list[bytes]) -> None:
    """Roots, leaves and proof elements may be hex strings."""
    tree = MerkleTree(sixteen_leaves, sha256)
    indices = [4, 7]
    assert tree.verify_multi_proof(
        tree.get_hex_root(),
        indices,
        ["0x" + sixteen_leaves[i].hex() for i in indices],
        tree.get_depth(),
        tree.get_hex_multi_proof(indices),
    )


def test_empty_indices_verify_trivially() -> None:
    """Nothing to prove is always proven."""
    assert verify_multi_proof(b"anything", [], [], 4, [], sha256) is True


@given(indices=st.lists(st.integers(min_value=0, max_value=15), min_size=1, unique=True))
def test_multiproof_property(indices: list[int]) -> None:
    """Any subset of leaves of a complete tree verifies, in any input order."""
    leaves = make_leaves(16)
    tree = MerkleTree(leaves, sha256)
    proof = tree.get_multi_proof(indices)
    targets = [leaves[i] for i in indices]
    assert verify_multi_proof(tree.get_root(), indices, targets, 4, proof, sha256) is True


def test_multi_proof_by_value_and_flags() -> None:
    """Value-addressed proofs collect siblings layer by layer; flags mark derived siblings."""
    tree = MerkleTree(make_leaves(8), sha256, sort=True)
    layers = tree.get_layers()
    targets = [layers[0][1], layers[0][4]]

    proof = tree.get_multi_proof_for_leaves(targets)
    assert proof == [layers[0][0], layers[0][5], layers[1][1], layers[1][3]]

    flags = tree.get_proof_flags(targets, proof)
    assert flags == [False, False, False, False, True]

    assert tree.verify_multi_proof_with_flags(tree.get_root(), targets, proof, flags) is True
    assert process_multi_proof(targets, proof, flags, sha256) == tree.get_root()


def test_sibling_targets_share_a_step() -> None:
    """Two sibling leaves need only the other half of the tree."""
    tree = MerkleTree(make_leaves(4), sha256, sort=True)
    layers = tree.get_layers()
    targets = layers[0][:2]

    proof = tree.get_multi_proof_for_leaves(targets)
    assert proof == [layers[1][1]]
    flags = tree.get_proof_flags(targets, proof)
    assert flags == [True, False]
    assert tree.verify_multi_proof_with_flags(tree.get_root(), targets, proof, flags) is True


def test_equal_values_at_different_positions_are_kept() -> None:
    """Filtering is by position, so a sibling equal to a visited node stays in the proof."""
    x, y = sha256(b"x"), sha256(b"y")
    tree = MerkleTree([x, x, y, y], sha256)
    # Leaf 1 equals the visited leaf 0 but sits at another position.
    proof = tree.get_multi_proof_for_leaves([x])
    assert proof == [x, sha256(y + y)]


def test_by_value_unknown_leaf_raises() -> None:
    """Unknown targets are reported, never skipped."""
    tree = MerkleTree(make_leaves(4), sha256)
    with pytest.raises(LeafNotFoundError) as excinfo:
        tree.get_multi_proof_for_leaves([tree.leaves[0], sha256(b"missing")])
    assert excinfo.value.leaf == sha256(b"missing")

    with pytest.raises(LeafNotFoundError):
        tree.get_proof_flags([sha256(b"missing")], [])


def test_flags_single_target_reads_every_sibling_from_proof() -> None:
    """A lone target consumes one proof element per level."""
    tree = MerkleTree(make_leaves(8), sha256, sort=True)
    target = tree.leaves[6]
    proof = tree.get_multi_proof_for_leaves([target])
    flags = tree.get_proof_flags([target], proof)
    assert flags == [False, False, False]
    assert tree.verify_multi_proof_with_flags(tree.get_root(), [target], proof, flags) is True


def test_flag_verifier_rejects_inconsistent_lengths() -> None:
    """Flag counts must match leaves plus proof minus one."""
    tree = MerkleTree(make_leaves(8), sha256, sort=True)
    target = tree.leaves[6]
    proof = tree.get_multi_proof_for_leaves([target])
    with pytest.raises(ValueError, match="Proof flags do not match"):
        process_multi_proof([target], proof, [False], sha256)
    assert (
        verify_multi_proof_with_flags(tree.get_root(), [target], proof, [False], sha256) is False
    )
    assert (
        verify_multi_proof_with_flags(tree.get_root(), [target], proof, [True] * 3, sha256)
        is False
    )


@given(
    data=st.data(),
    leaves=st.lists(st.binary(min_size=32, max_size=32), min_size=16, max_size=16, unique=True),
)
def test_flag_multiproof_property(data: st.DataObject, leaves: list[bytes]) -> None:
    """Value-addressed proofs and their flags verify for any target subset."""
    tree = MerkleTree(leaves, sha256, sort=True)
    positions = data.draw(
        st.lists(st.integers(min_value=0, max_value=15), min_size=1, max_size=16, unique=True)
    )
    targets = [tree.leaves[i] for i in sorted(positions)]

    proof = tree.get_multi_proof_for_leaves(targets)
    flags = tree.get_proof_flags(targets, proof)

    assert len(flags) == len(targets) + len(proof) - 1
    assert tree.verify_multi_proof_with_flags(tree.get_root(), targets, proof, flags) is True
