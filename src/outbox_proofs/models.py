from __future__ import annotations
from typing import List

from pydantic import BaseModel, Field, field_validator

from .accumulator import NodeEvent
from .crypto import B64, B64D, DIGEST_SIZE
from .proof import Proof


def _check_digest_b64(v: str) -> str:
    if len(B64D(v)) != DIGEST_SIZE:
        raise ValueError(f"digest must decode to {DIGEST_SIZE} bytes")
    return v


class ProofDocument(BaseModel):
    """JSON form of an inclusion proof (digests base64-encoded)."""

    root_hash_b64: str
    leaf_hash_b64: str
    leaf_index: int = Field(ge=0)
    proof_hashes_b64: List[str] = Field(default_factory=list)

    @field_validator("root_hash_b64", "leaf_hash_b64")
    @classmethod
    def _digest(cls, v: str) -> str:
        return _check_digest_b64(v)

    @field_validator("proof_hashes_b64")
    @classmethod
    def _digests(cls, v: List[str]) -> List[str]:
        return [_check_digest_b64(h) for h in v]

    @classmethod
    def from_proof(cls, proof: Proof) -> "ProofDocument":
        return cls(
            root_hash_b64=B64(proof.root_hash),
            leaf_hash_b64=B64(proof.leaf_hash),
            leaf_index=proof.leaf_index,
            proof_hashes_b64=[B64(h) for h in proof.proof_hashes],
        )

    def to_proof(self) -> Proof:
        return Proof(
            root_hash=B64D(self.root_hash_b64),
            leaf_hash=B64D(self.leaf_hash_b64),
            leaf_index=self.leaf_index,
            proof_hashes=[B64D(h) for h in self.proof_hashes_b64],
        )


class NodeEventRecord(BaseModel):
    level: int = Field(ge=0, lt=64)
    num_leaves_after: int = Field(gt=0)
    hash_b64: str

    @field_validator("hash_b64")
    @classmethod
    def _digest(cls, v: str) -> str:
        return _check_digest_b64(v)

    @classmethod
    def from_event(cls, event: NodeEvent) -> "NodeEventRecord":
        return cls(
            level=event.level,
            num_leaves_after=event.num_leaves_after,
            hash_b64=B64(event.hash),
        )

    def to_event(self) -> NodeEvent:
        return NodeEvent(self.level, self.num_leaves_after, B64D(self.hash_b64))


class TreeHead(BaseModel):
    """A (size, root) pair recorded after an append."""

    tree_size: int = Field(gt=0)
    root_hash_b64: str

    @field_validator("root_hash_b64")
    @classmethod
    def _digest(cls, v: str) -> str:
        return _check_digest_b64(v)


class StoreDocument(BaseModel):
    hash_algorithm: str
    events: List[NodeEventRecord] = Field(default_factory=list)
    heads: List[TreeHead] = Field(default_factory=list)
