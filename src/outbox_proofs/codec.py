"""Canonical node addressing for the node-event store.

A node is named by its level and the index of the rightmost leaf it covers,
so ``(level, leaf)`` spans leaves ``[leaf - 2**level + 1, leaf]``. The store
indexes nodes by a 16-byte big-endian key: level in the high 8 bytes, leaf in
the low 8 bytes. Keys therefore sort by level first, then by leaf.
"""
from __future__ import annotations
from typing import NamedTuple

from .errors import MalformedAddress

U64_MAX = (1 << 64) - 1
KEY_SIZE = 16


class NodeAddress(NamedTuple):
    level: int
    leaf: int

    def encode(self) -> bytes:
        return encode(self.level, self.leaf)

    @classmethod
    def decode(cls, key: bytes) -> "NodeAddress":
        return decode(key)

    def sibling(self) -> "NodeAddress":
        return NodeAddress(self.level, self.leaf ^ (1 << self.level))

    def parent(self) -> "NodeAddress":
        return NodeAddress(self.level + 1, self.leaf | (1 << self.level))


def encode(level: int, leaf: int) -> bytes:
    if not (0 <= level <= U64_MAX and 0 <= leaf <= U64_MAX):
        raise MalformedAddress(f"address out of u64 range: level={level} leaf={leaf}")
    return level.to_bytes(8, "big") + leaf.to_bytes(8, "big")


def decode(key: bytes) -> NodeAddress:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
        got = len(key) if isinstance(key, (bytes, bytearray)) else type(key).__name__
        raise MalformedAddress(f"node key must be {KEY_SIZE} bytes, got {got}")
    return NodeAddress(
        int.from_bytes(key[:8], "big"), int.from_bytes(key[8:], "big")
    )
