"""Explicit Merkle trees rebuilt from accumulator partials or event history.

Wholly-empty subtrees are represented by a single ``Empty`` node whose digest
is the zero digest, so a tree padded out to a power-of-two capacity hashes the
same way the accumulator does.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .accumulator import Accumulator, NodeEvent
from .crypto import ZERO, hash_pair, is_digest
from .errors import MalformedEvents

log = logging.getLogger(__name__)


class Tree:
    capacity: int

    def digest(self) -> bytes:
        raise NotImplementedError

    def prove(self, index: int) -> Optional[List[bytes]]:
        """Sibling digests from the leaf at ``index`` up to this node.

        Returns None when the leaf is not materialized (inside a Summary or Empty).
        """
        return None


@dataclass(frozen=True)
class Empty(Tree):
    capacity: int = 1

    def digest(self) -> bytes:
        return ZERO


@dataclass(frozen=True)
class Leaf(Tree):
    hash: bytes

    @property
    def capacity(self) -> int:
        return 1

    def digest(self) -> bytes:
        return self.hash

    def prove(self, index: int) -> Optional[List[bytes]]:
        return [] if index == 0 else None


@dataclass(frozen=True)
class Summary(Tree):
    """A complete subtree known only by its root digest."""

    hash: bytes
    capacity: int

    def digest(self) -> bytes:
        return self.hash


@dataclass(frozen=True)
class Internal(Tree):
    left: Tree
    right: Tree

    @property
    def capacity(self) -> int:
        return self.left.capacity + self.right.capacity

    def digest(self) -> bytes:
        return hash_pair(self.left.digest(), self.right.digest())

    def prove(self, index: int) -> Optional[List[bytes]]:
        half = self.left.capacity
        if index < half:
            path = self.left.prove(index)
            sibling = self.right
        else:
            path = self.right.prove(index - half)
            sibling = self.left
        if path is None:
            return None
        return path + [sibling.digest()]


def _pad(tree: Tree, capacity: int) -> Tree:
    while tree.capacity < capacity:
        tree = Internal(tree, Empty(tree.capacity))
    return tree


def tree_from_partials(partials: Sequence[Optional[bytes]]) -> Tree:
    """Fold partials, lowest level first, into a right-leaning spine.

    Each higher partial covers older leaves, so it becomes the left child and
    the tree built so far (padded with empties on the right) the right child.
    """
    tree: Optional[Tree] = None
    capacity = 1
    for level, partial in enumerate(partials):
        if partial is not None and partial != ZERO:
            this_level = Leaf(partial) if level == 0 else Summary(partial, capacity)
            if tree is None:
                tree = this_level
            else:
                tree = Internal(this_level, _pad(tree, capacity))
        capacity *= 2
    return tree if tree is not None else Empty()


def tree_from_leaves(leaves: Sequence[bytes]) -> Tree:
    """Materialize every leaf; digest matches an accumulator fed the same leaves."""
    n = len(leaves)
    if n == 0:
        return Empty()
    capacity = 1
    while capacity < n:
        capacity *= 2

    def build(lo: int, cap: int) -> Tree:
        if lo >= n:
            return Empty(cap)
        if cap == 1:
            return Leaf(leaves[lo])
        half = cap // 2
        return Internal(build(lo, half), build(lo + half, half))

    return build(0, capacity)


def latest_events(stream: Iterable[NodeEvent]) -> List[Optional[NodeEvent]]:
    """Reduce a raw event stream to the newest event seen at each level."""
    latest: List[Optional[NodeEvent]] = []
    for event in stream:
        while len(latest) <= event.level:
            latest.append(None)
        cur = latest[event.level]
        if cur is None or event.num_leaves_after > cur.num_leaves_after:
            latest[event.level] = event
    return latest


def accumulator_from_events(events: Sequence[Optional[NodeEvent]]) -> Accumulator:
    """Rebuild the current partials from the latest event at each level.

    Scanning from the highest level down, an event only survives if it is newer
    than every event kept above it; older ones were consumed by a later carry.
    """
    partials: List[Optional[bytes]] = [None] * len(events)
    latest_seen = 0
    for level in range(len(events) - 1, -1, -1):
        event = events[level]
        if event is None:
            continue
        if event.level != level:
            raise MalformedEvents(f"event reports level {event.level}", level)
        n = event.num_leaves_after
        if n <= 0 or n % (1 << level) != 0:
            raise MalformedEvents(
                f"num_leaves_after={n} cannot complete a node of {1 << level} leaves",
                level,
            )
        if not is_digest(event.hash):
            raise MalformedEvents("event hash is not a 32-byte digest", level)
        if n > latest_seen:
            latest_seen = n
            partials[level] = event.hash
    while partials and partials[-1] is None:
        partials.pop()
    acc = Accumulator.from_partials(partials)
    if acc.size() != latest_seen:
        raise MalformedEvents(
            f"surviving partials sum to {acc.size()} leaves, newest event says {latest_seen}"
        )
    log.debug("rebuilt accumulator of size %d from %d levels", acc.size(), len(events))
    return acc


def tree_from_events(events: Sequence[Optional[NodeEvent]]) -> Tree:
    return tree_from_partials(accumulator_from_events(events).partials())
