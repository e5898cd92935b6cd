from typing import Dict, Any

from pydantic import ValidationError

from outbox_proofs.models import ProofDocument
from outbox_proofs.proof import verify


def verify_proof_document(proof_json: Dict[str, Any]) -> bool:
    """Return True if the JSON inclusion proof recomputes its root.

    Expects root_hash_b64, leaf_hash_b64, leaf_index and proof_hashes_b64.
    Documents that fail schema validation are reported as invalid, not raised.
    """
    try:
        doc = ProofDocument.model_validate(proof_json)
    except ValidationError:
        return False
    return verify(doc.to_proof())


def verify_inclusion(
    leaf_hash_b64: str, proof_json: Dict[str, Any], root_hash_b64: str
) -> bool:
    """Check a proof document proves a specific leaf under a specific root."""
    if proof_json.get("leaf_hash_b64") != leaf_hash_b64:
        return False
    if proof_json.get("root_hash_b64") != root_hash_b64:
        return False
    return verify_proof_document(proof_json)
