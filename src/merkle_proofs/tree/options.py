"""Tree construction options."""

from pydantic import Field

from merkle_proofs.types import StrictBaseModel


class TreeOptions(StrictBaseModel):
    """
    Flags controlling how leaves are prepared and how pairs are combined.

    Field names can also be given in camel case (`hashLeaves`, `sortPairs`, ...).
    """

    hash_leaves: bool = Field(default=False, description="Hash every leaf before insertion.")

    sort_leaves: bool = Field(default=False, description="Sort the leaf layer byte-wise.")

    sort_pairs: bool = Field(
        default=False, description="Order each sibling pair byte-wise before hashing."
    )

    sort: bool = Field(default=False, description="Shorthand for sort_leaves and sort_pairs.")

    duplicate_odd: bool = Field(
        default=False, description="Pair a lonely last node with itself instead of promoting it."
    )

    is_bitcoin_tree: bool = Field(
        default=False, description="Combine nodes with Bitcoin's reverse/double-hash rule."
    )

    @property
    def sorts_leaves(self) -> bool:
        """Whether the leaf layer is sorted."""
        return self.sort_leaves or self.sort

    @property
    def sorts_pairs(self) -> bool:
        """Whether sibling pairs are sorted before hashing."""
        return self.sort_pairs or self.sort
