"""Fuzz harness for accumulator appends, event replay and root derivation."""
from __future__ import annotations
import atheris
import sys
import hashlib

with atheris.instrument_imports():
    from outbox_proofs.accumulator import Accumulator
    from outbox_proofs.tree import accumulator_from_events, latest_events, tree_from_leaves


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Bounded leaf count keeps each run linear
    count = 1 + data[0] % 64
    leaves = [hashlib.sha256(data[1:] + bytes([i])).digest() for i in range(count)]
    acc = Accumulator()
    stream = []
    for n, leaf in enumerate(leaves, start=1):
        stream.extend(acc.append_with_events(leaf))
        occupied = [i for i, p in enumerate(acc.partials()) if p is not None]
        if occupied != [i for i in range(n.bit_length()) if n >> i & 1]:
            raise RuntimeError(f"partials out of step with size {n}")
    if acc.root() != tree_from_leaves(leaves).digest():
        raise RuntimeError("accumulator root disagrees with explicit tree")
    replayed = accumulator_from_events(latest_events(stream))
    if replayed.partials() != acc.partials():
        raise RuntimeError("event replay lost partials")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
