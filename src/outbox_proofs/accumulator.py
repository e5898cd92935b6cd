from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .codec import NodeAddress, U64_MAX
from .crypto import ZERO, hash_pair, is_digest
from .errors import AccumulatorOverflow, EmptyTreeError, InvalidPartials


Partials = List[Optional[bytes]]


@dataclass(frozen=True)
class NodeEvent:
    """A node digest emitted when an append completes a subtree.

    ``num_leaves_after`` is the accumulator size right after the append, so the
    node's rightmost leaf is ``num_leaves_after - 1``.
    """

    level: int
    num_leaves_after: int
    hash: bytes

    @property
    def address(self) -> NodeAddress:
        return NodeAddress(self.level, self.num_leaves_after - 1)


class Accumulator:
    """Append-only Merkle accumulator holding one partial digest per set bit of size.

    ``partials[i]`` is the root of a complete ``2**i``-leaf subtree. Higher
    levels summarize older leaves; level 0 (when present) is the newest leaf.
    """

    def __init__(self, partials: Optional[Sequence[Optional[bytes]]] = None):
        self._partials: Partials = []
        self._size = 0
        if partials:
            self._load(partials)

    @classmethod
    def new_empty(cls) -> "Accumulator":
        return cls()

    @classmethod
    def from_partials(cls, partials: Sequence[Optional[bytes]]) -> "Accumulator":
        return cls(partials)

    def _load(self, partials: Sequence[Optional[bytes]]) -> None:
        slots: Partials = []
        size = 0
        for level, p in enumerate(partials):
            if p is None or p == ZERO:
                slots.append(None)
                continue
            if not is_digest(p):
                raise InvalidPartials(f"partial at level {level} is not a 32-byte digest")
            slots.append(bytes(p))
            size += 1 << level
        if slots[-1] is None:
            raise InvalidPartials(
                f"highest partial slot {len(slots) - 1} is empty; size implies "
                f"{size.bit_length()} levels"
            )
        if size > U64_MAX:
            raise InvalidPartials(f"partials imply size {size} beyond u64")
        self._partials = slots
        self._size = size

    def size(self) -> int:
        return self._size

    def partials(self) -> Partials:
        return list(self._partials)

    def append(self, leaf: bytes) -> int:
        self.append_with_events(leaf)
        return self._size

    def append_with_events(self, leaf: bytes) -> List[NodeEvent]:
        """Add one leaf, carrying like a binary counter.

        Returns the level-0 event for the leaf and one event for every parent
        formed while carrying.
        """
        if not is_digest(leaf):
            raise ValueError("leaf must be a 32-byte digest")
        if self._size == U64_MAX:
            raise AccumulatorOverflow(self._size)
        self._size += 1
        carry = bytes(leaf)
        events = [NodeEvent(0, self._size, carry)]
        level = 0
        while level < len(self._partials) and self._partials[level] is not None:
            carry = hash_pair(self._partials[level], carry)
            self._partials[level] = None
            level += 1
            events.append(NodeEvent(level, self._size, carry))
        if level == len(self._partials):
            self._partials.append(carry)
        else:
            self._partials[level] = carry
        return events

    def root(self) -> bytes:
        if self._size == 0:
            raise EmptyTreeError()
        if self._size & (self._size - 1) == 0:
            return self._partials[-1]
        # Non-power-of-two sizes only have a root once padded out to a full tree
        from .tree import tree_from_partials

        return tree_from_partials(self._partials).digest()

    def clone(self) -> "Accumulator":
        other = Accumulator.__new__(Accumulator)
        other._partials = list(self._partials)
        other._size = self._size
        return other

    def __repr__(self) -> str:
        levels = [i for i, p in enumerate(self._partials) if p is not None]
        return f"Accumulator(size={self._size}, levels={levels})"
