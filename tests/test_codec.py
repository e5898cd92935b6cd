import pytest

from outbox_proofs.codec import NodeAddress, U64_MAX, decode, encode
from outbox_proofs.errors import MalformedAddress, MerkleError


def test_encode_layout():
    key = encode(3, 5)
    assert len(key) == 16
    assert key[:8] == (3).to_bytes(8, "big")
    assert key[8:] == (5).to_bytes(8, "big")
    assert decode(key) == NodeAddress(3, 5)


def test_extremes_round_trip():
    for level, leaf in [(0, 0), (U64_MAX, U64_MAX), (63, 2**63 - 1)]:
        assert NodeAddress.decode(NodeAddress(level, leaf).encode()) == (level, leaf)


def test_keys_sort_by_level_then_leaf():
    addrs = [NodeAddress(1, 0), NodeAddress(0, 9), NodeAddress(0, 2), NodeAddress(2, 1)]
    by_key = sorted(addrs, key=lambda a: a.encode())
    assert by_key == sorted(addrs)
    assert by_key[0] == NodeAddress(0, 2)


@pytest.mark.parametrize("bad", [b"", b"\x00" * 15, b"\x00" * 17, b"\x00" * 32])
def test_decode_rejects_wrong_length(bad):
    with pytest.raises(MalformedAddress):
        decode(bad)


def test_encode_rejects_out_of_range():
    with pytest.raises(MalformedAddress):
        encode(-1, 0)
    with pytest.raises(MerkleError):
        encode(0, U64_MAX + 1)


def test_sibling_and_parent():
    a = NodeAddress(1, 5)
    assert a.sibling() == NodeAddress(1, 7)
    assert a.parent() == NodeAddress(2, 7)
    assert NodeAddress(0, 6).sibling() == NodeAddress(0, 7)
