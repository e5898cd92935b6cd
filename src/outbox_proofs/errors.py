from __future__ import annotations
from typing import Optional


class MerkleError(ValueError):
    """Base class for accumulator, tree and proof failures."""


class AccumulatorOverflow(MerkleError):
    def __init__(self, size: int):
        super().__init__(f"accumulator is full at size {size}")
        self.size = size


class EmptyTreeError(MerkleError):
    def __init__(self, what: str = "root"):
        super().__init__(f"{what} requested on an empty tree")


class InvalidPartials(MerkleError):
    pass


class MalformedEvents(MerkleError):
    def __init__(self, msg: str, level: Optional[int] = None):
        super().__init__(msg if level is None else f"level {level}: {msg}")
        self.level = level


class MalformedAddress(MerkleError):
    pass


class _UnresolvedNode(MerkleError):
    def __init__(self, msg: str, address):
        super().__init__(f"{msg} at level {address.level} leaf {address.leaf}")
        self.address = address
        self.level = address.level


class MissingFrontierNode(_UnresolvedNode):
    """The frontier walk reached a node whose digest is unknown."""


class IncompleteProof(_UnresolvedNode):
    """A required proof node was neither returned by lookup nor derived."""


class RootMismatch(MerkleError):
    def __init__(self, expected: bytes, computed: bytes, tree_size: int):
        super().__init__(
            f"frontier walk for size {tree_size} produced {computed.hex()}, "
            f"expected {expected.hex()}"
        )
        self.expected = expected
        self.computed = computed
        self.tree_size = tree_size
