"""
Shared pytest fixtures for merkle_proofs tests.

Provides deterministic leaf sets.
"""

from __future__ import annotations

import pytest

from merkle_proofs.tree.merkle_tree import sha256
from tests.merkle_proofs.helpers import make_leaves


@pytest.fixture
def abcd_leaves() -> list[bytes]:
    """The leaves a, b, c and d, each hashed with SHA-256."""
    return [sha256(x) for x in (b"a", b"b", b"c", b"d")]


@pytest.fixture
def sixteen_leaves() -> list[bytes]:
    """Sixteen distinct hashed leaves, enough for a complete depth 4 tree."""
    return make_leaves(16)
