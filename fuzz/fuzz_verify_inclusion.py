"""Historical inclusion proofs against a grown log, with mutated proofs."""
from __future__ import annotations
import atheris
import sys
import hashlib
import random

with atheris.instrument_imports():
    from outbox_proofs.proof import Proof, verify
    from outbox_proofs.prover import build_proof
    from outbox_proofs.store import OutboxLog


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    seed = int.from_bytes(data[:4], 'little')
    random.seed(seed)
    total = 2 + data[4] % 96
    log = OutboxLog()
    leaves = [hashlib.sha256(data[5:] + i.to_bytes(2, 'big')).digest() for i in range(total)]
    for leaf in leaves:
        log.append(leaf)
    # prove against an older head than the store's current size
    size = 1 + seed % total
    idx = (seed >> 8) % size
    proof = build_proof(idx, leaves[idx], log.store.head(size), size, log.store.lookup)
    if not verify(proof):
        raise RuntimeError("valid proof failed")
    if proof.proof_hashes and random.random() < 0.5:
        j = random.randrange(len(proof.proof_hashes))
        hashes = list(proof.proof_hashes)
        hashes[j] = bytes([hashes[j][0] ^ 0x01]) + hashes[j][1:]
        if verify(Proof(proof.root_hash, proof.leaf_hash, idx, hashes)):
            raise RuntimeError("tampered proof unexpectedly verified")
    elif verify(Proof(proof.root_hash, proof.leaf_hash, idx + 1, proof.proof_hashes)):
        raise RuntimeError("proof verified at the wrong index")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
