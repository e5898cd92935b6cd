import pytest
from pydantic import ValidationError

from outbox_proofs.crypto import B64
from outbox_proofs.models import ProofDocument
from outbox_proofs.prover import build_proof
from outbox_sdk.verify import verify_inclusion, verify_proof_document
from tests._helpers import make_leaves, populated_log


@pytest.fixture(scope="module")
def proof_doc():
    leaves = make_leaves(21)
    log = populated_log(leaves)
    proof = build_proof(13, leaves[13], log.store.head(19), 19, log.store.lookup)
    return ProofDocument.from_proof(proof).model_dump()


def test_document_round_trip(proof_doc):
    doc = ProofDocument.model_validate(proof_doc)
    assert ProofDocument.from_proof(doc.to_proof()).model_dump() == proof_doc


def test_valid_document(proof_doc):
    assert verify_proof_document(proof_doc)
    assert verify_inclusion(proof_doc["leaf_hash_b64"], proof_doc, proof_doc["root_hash_b64"])


def test_wrong_expected_leaf_or_root(proof_doc):
    other = B64(make_leaves(1, tag="other")[0])
    assert not verify_inclusion(other, proof_doc, proof_doc["root_hash_b64"])
    assert not verify_inclusion(proof_doc["leaf_hash_b64"], proof_doc, other)


def test_tampered_document(proof_doc):
    bad = dict(proof_doc, leaf_index=proof_doc["leaf_index"] + 1)
    assert not verify_proof_document(bad)
    hashes = list(proof_doc["proof_hashes_b64"])
    hashes[1] = B64(make_leaves(1, tag="forged")[0])
    assert not verify_proof_document(dict(proof_doc, proof_hashes_b64=hashes))


@pytest.mark.parametrize(
    "mutation",
    [
        {"root_hash_b64": "not-base64!"},
        {"leaf_hash_b64": B64(b"\x00" * 31)},
        {"leaf_index": -1},
        {"proof_hashes_b64": ["AAAA"]},
    ],
)
def test_malformed_documents_are_invalid(proof_doc, mutation):
    bad = dict(proof_doc, **mutation)
    with pytest.raises(ValidationError):
        ProofDocument.model_validate(bad)
    assert verify_proof_document(bad) is False


def test_missing_fields():
    assert verify_proof_document({}) is False
