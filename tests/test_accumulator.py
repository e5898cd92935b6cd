import pytest

from outbox_proofs.accumulator import Accumulator, NodeEvent
from outbox_proofs.codec import NodeAddress, U64_MAX
from outbox_proofs.crypto import ZERO, hash_pair
from outbox_proofs.errors import AccumulatorOverflow, EmptyTreeError, InvalidPartials
from outbox_proofs.tree import tree_from_leaves
from tests._helpers import make_leaves


def test_occupied_levels_track_size_bits():
    acc = Accumulator.new_empty()
    for n, leaf in enumerate(make_leaves(3000), start=1):
        assert acc.append(leaf) == n
        occupied = {i for i, p in enumerate(acc.partials()) if p is not None}
        assert occupied == {i for i in range(n.bit_length()) if n >> i & 1}
        assert len(acc.partials()) == n.bit_length()


def test_root_matches_explicit_tree(leaves):
    acc = Accumulator()
    for n, leaf in enumerate(leaves, start=1):
        acc.append(leaf)
        assert acc.root() == tree_from_leaves(leaves[:n]).digest()


def test_power_of_two_root_is_top_partial(leaves):
    acc = Accumulator()
    for leaf in leaves[:8]:
        acc.append(leaf)
    assert acc.partials()[:3] == [None, None, None]
    assert acc.root() == acc.partials()[3]
    l01 = hash_pair(leaves[0], leaves[1])
    l23 = hash_pair(leaves[2], leaves[3])
    l45 = hash_pair(leaves[4], leaves[5])
    l67 = hash_pair(leaves[6], leaves[7])
    assert acc.root() == hash_pair(hash_pair(l01, l23), hash_pair(l45, l67))


def test_size_three_root_pads_with_zero(leaves):
    acc = Accumulator()
    for leaf in leaves[:3]:
        acc.append(leaf)
    assert acc.root() == hash_pair(hash_pair(leaves[0], leaves[1]), hash_pair(leaves[2], ZERO))


def test_empty_root_raises():
    with pytest.raises(EmptyTreeError):
        Accumulator().root()


def test_from_partials_derives_size(leaves):
    acc = Accumulator()
    for leaf in leaves[:13]:
        acc.append(leaf)
    copy = Accumulator.from_partials(acc.partials())
    assert copy.size() == 13
    assert copy.root() == acc.root()


def test_from_partials_treats_zero_as_absent(leaves):
    acc = Accumulator.from_partials([ZERO, leaves[0]])
    assert acc.size() == 2
    assert acc.partials() == [None, leaves[0]]


def test_from_partials_rejects_trailing_empty(leaves):
    with pytest.raises(InvalidPartials):
        Accumulator.from_partials([leaves[0], None])
    with pytest.raises(InvalidPartials):
        Accumulator.from_partials([None, ZERO])


def test_from_partials_rejects_bad_digest():
    with pytest.raises(InvalidPartials):
        Accumulator.from_partials([b"short"])


def test_overflow_at_u64_max(leaves):
    full = Accumulator.from_partials([leaves[0]] * 64)
    assert full.size() == U64_MAX
    before = full.partials()
    with pytest.raises(AccumulatorOverflow):
        full.append(leaves[1])
    assert full.partials() == before
    assert full.size() == U64_MAX


def test_append_rejects_non_digest():
    with pytest.raises(ValueError):
        Accumulator().append(b"not a digest")


def test_clone_is_independent(leaves):
    acc = Accumulator()
    for leaf in leaves[:5]:
        acc.append(leaf)
    root5 = acc.root()
    branch = acc.clone()
    branch.append(leaves[5])
    assert acc.size() == 5 and branch.size() == 6
    assert acc.root() == root5
    assert branch.root() == tree_from_leaves(leaves[:6]).digest()
    snapshot = branch.partials()
    acc.append(leaves[40])
    assert branch.partials() == snapshot
    assert acc.partials() != snapshot


def test_append_events(leaves):
    acc = Accumulator()
    for leaf in leaves[:3]:
        acc.append(leaf)
    events = acc.append_with_events(leaves[3])
    l01 = hash_pair(leaves[0], leaves[1])
    l23 = hash_pair(leaves[2], leaves[3])
    assert events == [
        NodeEvent(0, 4, leaves[3]),
        NodeEvent(1, 4, l23),
        NodeEvent(2, 4, hash_pair(l01, l23)),
    ]
    assert [e.address for e in events] == [
        NodeAddress(0, 3),
        NodeAddress(1, 3),
        NodeAddress(2, 3),
    ]
