"""Inclusion proofs against a historical (root, size) pair.

Only a sparse set of nodes is fetched from the node store: the in-range
siblings along the leaf's path, plus the accumulator partials of the
historical size when that size is not a power of two. Nodes on the right-hand
frontier of an unbalanced tree never existed in the store with their
historical values, so they are rebuilt by walking up from the lowest partial
against zero-digest padding.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Mapping, Set

from .accumulator import Accumulator
from .codec import NodeAddress
from .crypto import ZERO, hash_pair, is_digest
from .errors import EmptyTreeError, IncompleteProof, MissingFrontierNode, RootMismatch
from .proof import Proof

log = logging.getLogger(__name__)

Lookup = Callable[[Set[NodeAddress]], Mapping[NodeAddress, bytes]]
AsyncLookup = Callable[[Set[NodeAddress]], Awaitable[Mapping[NodeAddress, bytes]]]


def tree_levels(tree_size: int) -> int:
    """Number of levels including the leaves, i.e. the bit length of the size."""
    return tree_size.bit_length()


def is_balanced(tree_size: int) -> bool:
    return tree_size > 0 and tree_size & (tree_size - 1) == 0


@dataclass
class ProofPlan:
    leaf_index: int
    tree_size: int
    nodes: List[NodeAddress] = field(default_factory=list)  # one per proof level
    query: Set[NodeAddress] = field(default_factory=set)
    partials: Dict[int, NodeAddress] = field(default_factory=dict)  # level -> address

    @property
    def balanced(self) -> bool:
        return is_balanced(self.tree_size)

    @property
    def levels(self) -> int:
        return tree_levels(self.tree_size)


def plan_proof(leaf_index: int, tree_size: int) -> ProofPlan:
    if tree_size <= 0:
        raise EmptyTreeError("proof")
    if not 0 <= leaf_index < tree_size:
        raise ValueError(f"leaf index {leaf_index} outside tree of size {tree_size}")

    plan = ProofPlan(leaf_index, tree_size)
    walk_levels = plan.levels - (1 if plan.balanced else 0)

    place = leaf_index
    for level in range(walk_levels):
        which = 1 << level
        sibling = NodeAddress(level, place ^ which)
        plan.nodes.append(sibling)
        # siblings past the historical size did not exist yet
        if sibling.leaf < tree_size:
            plan.query.add(sibling)
        place |= which

    if not plan.balanced:
        total = 0
        for level in range(plan.levels - 1, -1, -1):
            if tree_size & (1 << level):
                total += 1 << level
                partial = NodeAddress(level, total - 1)
                plan.partials[level] = partial
                plan.query.add(partial)
    return plan


def _walk_frontier(
    plan: ProofPlan, known: Dict[NodeAddress, bytes], root_hash: bytes
) -> bytes:
    """Fill in the frontier nodes of an unbalanced tree and return the root."""
    min_level = min(plan.partials)
    start = plan.partials[min_level]
    step = NodeAddress(start.level, start.leaf + (1 << start.level))
    known[step] = ZERO

    while step.level < plan.levels:
        curr = known.get(step)
        if curr is None:
            raise MissingFrontierNode("frontier node unknown", step)
        width = 1 << step.level
        if step.level in plan.partials:
            # a partial on the frontier is always a left child
            step = NodeAddress(step.level, step.leaf - width)
            left = known.get(step)
            if left is None:
                raise MissingFrontierNode("partial not returned by lookup", step)
            right = curr
        else:
            # the mirror subtree on the right is still empty
            left = curr
            step = NodeAddress(step.level, step.leaf + width)
            known[step] = ZERO
            right = ZERO
        step = step.parent()
        known[step] = hash_pair(left, right)

    computed = known[step]
    if computed != root_hash:
        log.warning(
            "frontier walk for size %d ended at %s, expected root %s",
            plan.tree_size,
            computed.hex(),
            root_hash.hex(),
        )
        raise RootMismatch(root_hash, computed, plan.tree_size)
    log.debug("frontier resolved for size %d", plan.tree_size)
    return computed


def resolve_proof(
    plan: ProofPlan,
    root_hash: bytes,
    leaf_hash: bytes,
    found: Mapping[NodeAddress, bytes],
) -> Proof:
    """Turn lookup results into a proof, rebuilding the frontier if needed."""
    if not is_digest(root_hash):
        raise ValueError("root hash must be a 32-byte digest")
    known: Dict[NodeAddress, bytes] = {}
    for address in plan.query:
        value = found.get(address)
        if value is not None:
            if not is_digest(value):
                raise IncompleteProof("lookup returned a malformed digest", address)
            known[address] = bytes(value)
    log.debug(
        "leaf %d of %d: %d of %d queried nodes found",
        plan.leaf_index,
        plan.tree_size,
        len(known),
        len(plan.query),
    )

    if not plan.balanced:
        _walk_frontier(plan, known, root_hash)

    hashes = []
    for address in plan.nodes:
        value = known.get(address)
        if value is None:
            raise IncompleteProof("no digest for proof node", address)
        hashes.append(value)
    return Proof(
        root_hash=bytes(root_hash),
        leaf_hash=bytes(leaf_hash),
        leaf_index=plan.leaf_index,
        proof_hashes=hashes,
    )


def build_proof(
    leaf_index: int,
    leaf_hash: bytes,
    root_hash: bytes,
    tree_size: int,
    lookup: Lookup,
) -> Proof:
    """Prove ``leaf_hash`` sits at ``leaf_index`` of the tree committed as
    ``(root_hash, tree_size)``, issuing a single batched lookup."""
    plan = plan_proof(leaf_index, tree_size)
    found = lookup(set(plan.query)) if plan.query else {}
    return resolve_proof(plan, root_hash, leaf_hash, found)


async def build_proof_async(
    leaf_index: int,
    leaf_hash: bytes,
    root_hash: bytes,
    tree_size: int,
    lookup: AsyncLookup,
) -> Proof:
    plan = plan_proof(leaf_index, tree_size)
    found = await lookup(set(plan.query)) if plan.query else {}
    return resolve_proof(plan, root_hash, leaf_hash, found)


def prove_next_append(acc: Accumulator, leaf_hash: bytes) -> Proof:
    """Proof that ``leaf_hash`` would land at index ``acc.size()`` after one more append.

    The canonical accumulator is left untouched; the root comes from a clone.
    """
    branch = acc.clone()
    branch.append(leaf_hash)
    return Proof(
        root_hash=branch.root(),
        leaf_hash=bytes(leaf_hash),
        leaf_index=acc.size(),
        proof_hashes=[p if p is not None else ZERO for p in acc.partials()],
    )
