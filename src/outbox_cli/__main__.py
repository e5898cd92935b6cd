from __future__ import annotations
import json
import logging
import pathlib
from typing import Optional

import typer
from rich import print

from outbox_proofs.codec import NodeAddress
from outbox_proofs.crypto import B64, B64D, jcs_dumps, leaf_digest
from outbox_proofs.logutil import setup_logging
from outbox_proofs.models import ProofDocument
from outbox_proofs.prover import build_proof
from outbox_proofs.settings import settings
from outbox_proofs.store import InMemoryNodeStore, OutboxLog
from outbox_proofs.tree import accumulator_from_events

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    setup_logging(level, abbreviate=settings.abbreviate_digests)


def _load_store(path: str) -> InMemoryNodeStore:
    p = pathlib.Path(path)
    if not p.exists():
        return InMemoryNodeStore()
    try:
        return InMemoryNodeStore.loads(p.read_text())
    except ValueError as e:
        print(f"[red]Cannot read store {path}: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def accumulate(
    leaves: str = typer.Argument(..., help="File with one leaf per line"),
    store: str = typer.Option("./outbox-store.json", help="Node store JSON (created if missing)"),
    hex_digests: bool = typer.Option(
        False, "--hex", help="Lines are hex 32-byte digests rather than raw content"
    ),
):
    """Append leaves to the log and publish their node events to the store."""
    log_ = OutboxLog(_load_store(store))
    for line in pathlib.Path(leaves).read_text().splitlines():
        if not line.strip():
            continue
        if hex_digests:
            try:
                leaf = bytes.fromhex(line.strip())
            except ValueError:
                raise typer.BadParameter(f"not hex: {line!r}")
            if len(leaf) != 32:
                raise typer.BadParameter(f"not a 32-byte digest: {line!r}")
        else:
            leaf = leaf_digest(line.encode())
        log_.append(leaf)
    pathlib.Path(store).write_text(log_.store.dumps())
    print(f"[green]Log size {log_.size()}, root {log_.root().hex()}[/green]")


@app.command()
def root(store: str = typer.Option("./outbox-store.json")):
    """Rebuild the accumulator from the store's latest events and print its head."""
    acc = accumulator_from_events(_load_store(store).latest_events())
    if acc.size() == 0:
        print("[yellow]Store is empty[/yellow]")
        raise typer.Exit(code=0)
    print({"tree_size": acc.size(), "root_hash_b64": B64(acc.root())})


@app.command()
def prove(
    leaf_index: int = typer.Argument(..., help="Zero-based index of the leaf"),
    tree_size: int = typer.Option(..., help="Historical log size to prove against"),
    root_b64: Optional[str] = typer.Option(
        None, help="Historical root; defaults to the head recorded for tree_size"
    ),
    store: str = typer.Option("./outbox-store.json"),
    out: Optional[str] = typer.Option(None, help="Write canonical proof JSON here"),
):
    """Build an inclusion proof against a historical (root, size) pair."""
    nodes = _load_store(store)
    if root_b64 is not None:
        try:
            root_hash = B64D(root_b64)
        except ValueError:
            raise typer.BadParameter("root must be base64")
    else:
        root_hash = nodes.head(tree_size)
        if root_hash is None:
            print(f"[red]No recorded head for size {tree_size}; pass --root-b64[/red]")
            raise typer.Exit(code=1)
    address = NodeAddress(0, leaf_index)
    leaf = nodes.lookup({address}).get(address)
    if leaf is None:
        print(f"[red]Leaf {leaf_index} not found in store[/red]")
        raise typer.Exit(code=1)
    try:
        proof = build_proof(leaf_index, leaf, root_hash, tree_size, nodes.lookup)
    except ValueError as e:
        print(f"[red]Proof failed: {e}[/red]")
        raise typer.Exit(code=1)
    doc = ProofDocument.from_proof(proof).model_dump()
    if out:
        pathlib.Path(out).write_bytes(jcs_dumps(doc))
        print(f"[green]Wrote proof to {out}[/green]")
    else:
        print(doc)


@app.command()
def verify(path: str):
    """Verify a proof document; exits 1 when it does not recompute its root."""
    from outbox_sdk.verify import verify_proof_document

    obj = json.load(open(path))
    ok = verify_proof_document(obj)
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
