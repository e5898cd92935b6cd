from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .crypto import hash_pair, is_digest


@dataclass(frozen=True)
class Proof:
    root_hash: bytes
    leaf_hash: bytes
    leaf_index: int
    proof_hashes: List[bytes] = field(default_factory=list)  # lowest level first

    def is_correct(self) -> bool:
        return verify(self)


def verify(proof: Proof) -> bool:
    """Recompute the root from the leaf and its sibling path.

    A clear bit in the index means the running node is a left child. Never
    raises; malformed input simply fails to verify.
    """
    if not (is_digest(proof.leaf_hash) and is_digest(proof.root_hash)):
        return False
    if not isinstance(proof.leaf_index, int) or proof.leaf_index < 0:
        return False
    # Index bits above the proof depth would alias a different leaf
    if proof.leaf_index >> len(proof.proof_hashes):
        return False
    h = bytes(proof.leaf_hash)
    idx = proof.leaf_index
    for sibling in proof.proof_hashes:
        if not is_digest(sibling):
            return False
        if idx & 1 == 0:
            h = hash_pair(h, bytes(sibling))
        else:
            h = hash_pair(bytes(sibling), h)
        idx >>= 1
    return h == proof.root_hash
