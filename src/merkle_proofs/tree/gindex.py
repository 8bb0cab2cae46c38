"""Generalized indices: node addresses in a complete binary tree."""

from typing import List

from pydantic import Field

from merkle_proofs.types import StrictBaseModel


class GeneralizedIndex(StrictBaseModel):
    """
    The address of a node in a complete binary tree.

    The root is 1 and the children of `k` are `2k` and `2k + 1`, so leaf `i`
    of a depth `d` tree sits at `2**d + i`. Addresses below 1 are rejected.
    """

    value: int = Field(..., gt=0, description="Address of the node, 1 for the root.")

    @classmethod
    def leaf(cls, depth: int, index: int) -> "GeneralizedIndex":
        """Returns the address of leaf `index` in a tree of the given depth."""
        return cls(value=(1 << depth) + index)

    @property
    def is_right(self) -> bool:
        """Whether the node is the right child of its parent."""
        return self.value & 1 == 1

    @property
    def sibling(self) -> "GeneralizedIndex":
        """The other child of this node's parent."""
        return type(self)(value=self.value ^ 1)

    @property
    def parent(self) -> "GeneralizedIndex":
        """The node one level up."""
        if self.value <= 1:
            raise ValueError("Root node has no parent.")
        return type(self)(value=self.value // 2)

    def get_branch_indices(self) -> List["GeneralizedIndex"]:
        """Siblings of every node on the way to the root, leaf level first."""
        branch: List["GeneralizedIndex"] = []
        node = self
        while node.value > 1:
            branch.append(node.sibling)
            node = node.parent
        return branch
