"""In-memory node store implementing the batched lookup capability.

Nodes are indexed by the canonical 16-byte address key, the same key an
external event index would filter on.
"""
from __future__ import annotations
import json
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

from .accumulator import NodeEvent
from .codec import NodeAddress
from .crypto import B64, B64D
from .models import NodeEventRecord, StoreDocument, TreeHead
from .settings import settings
from .tree import accumulator_from_events, latest_events

log = logging.getLogger(__name__)


class InMemoryNodeStore:
    def __init__(self):
        self._nodes: Dict[bytes, bytes] = {}
        self._events: List[NodeEvent] = []
        self._heads: Dict[int, bytes] = {}

    def record(self, events: Iterable[NodeEvent]) -> None:
        for event in events:
            self._events.append(event)
            self._nodes[event.address.encode()] = event.hash

    def record_head(self, tree_size: int, root_hash: bytes) -> None:
        self._heads[tree_size] = root_hash

    def lookup(self, addresses: Set[NodeAddress]) -> Mapping[NodeAddress, bytes]:
        found = {}
        for address in addresses:
            value = self._nodes.get(address.encode())
            if value is not None:
                found[address] = value
        log.debug("lookup: %d of %d addresses present", len(found), len(addresses))
        return found

    async def lookup_async(self, addresses: Set[NodeAddress]) -> Mapping[NodeAddress, bytes]:
        return self.lookup(addresses)

    def events(self) -> List[NodeEvent]:
        return list(self._events)

    def latest_events(self) -> List[Optional[NodeEvent]]:
        return latest_events(self._events)

    def head(self, tree_size: int) -> Optional[bytes]:
        return self._heads.get(tree_size)

    def heads(self) -> Dict[int, bytes]:
        return dict(self._heads)

    def __len__(self) -> int:
        return len(self._nodes)

    def to_document(self) -> StoreDocument:
        return StoreDocument(
            hash_algorithm=settings.hash_algorithm,
            events=[NodeEventRecord.from_event(e) for e in self._events],
            heads=[
                TreeHead(tree_size=n, root_hash_b64=B64(r))
                for n, r in sorted(self._heads.items())
            ],
        )

    @classmethod
    def from_document(cls, doc: StoreDocument) -> "InMemoryNodeStore":
        if doc.hash_algorithm != settings.hash_algorithm:
            raise ValueError(
                f"store was written with {doc.hash_algorithm}, "
                f"configured algorithm is {settings.hash_algorithm}"
            )
        store = cls()
        store.record(r.to_event() for r in doc.events)
        for h in doc.heads:
            store.record_head(h.tree_size, B64D(h.root_hash_b64))
        return store

    def dumps(self) -> str:
        return json.dumps(self.to_document().model_dump(), indent=2)

    @classmethod
    def loads(cls, text: str) -> "InMemoryNodeStore":
        return cls.from_document(StoreDocument.model_validate_json(text))


class OutboxLog:
    """An accumulator whose appends are published to a node store."""

    def __init__(self, store: Optional[InMemoryNodeStore] = None, record_heads: bool = True):
        self.store = store if store is not None else InMemoryNodeStore()
        self.record_heads = record_heads
        self.acc = accumulator_from_events(self.store.latest_events())

    def append(self, leaf: bytes) -> int:
        self.store.record(self.acc.append_with_events(leaf))
        size = self.acc.size()
        if self.record_heads:
            self.store.record_head(size, self.acc.root())
        return size

    def size(self) -> int:
        return self.acc.size()

    def root(self) -> bytes:
        return self.acc.root()
