import hashlib

import pytest

from hash_ring_errors import NotFound
from node_registry import Node
from position_table import PositionTable, placement, replica_placement


def sha1_words(data: bytes):
    digest = hashlib.sha1(data).digest()
    return [int.from_bytes(digest[i:i + 4], "big") for i in range(0, 20, 4)]


def test_placement_uses_fourth_and_fifth_words():
    words = sha1_words(b"node-A")
    assert placement(b"node-A") == (words[3] << 32) | words[4]
    assert 0 <= placement(b"x") < 2 ** 64


def test_replica_placement_appends_decimal_index():
    assert replica_placement(b"node-A", 0) == placement(b"node-A0")
    assert replica_placement(b"node-A", 12) == placement(b"node-A12")


def test_add_replicas_keeps_table_sorted():
    table = PositionTable()
    a, b = Node(b"A"), Node(b"B")
    table.add_replicas(a, 5)
    table.add_replicas(b, 5)
    assert len(table) == 10
    assert table.hashes() == sorted(table.hashes())
    assert sorted(item.hash for item in table if item.node is a) == sorted(
        replica_placement(b"A", i) for i in range(5)
    )


def test_remove_replicas_only_drops_that_node():
    table = PositionTable()
    a, b, c = Node(b"A"), Node(b"B"), Node(b"C")
    for node in (a, b, c):
        table.add_replicas(node, 4)
    assert table.remove_replicas(b) == 4
    assert len(table) == 8
    assert all(item.node is not b for item in table)
    assert table.hashes() == sorted(table.hashes())
    assert table.remove_replicas(b) == 0


def test_find_next_highest_is_strictly_greater():
    table = PositionTable()
    table.add_replicas(Node(b"A"), 3)
    table.add_replicas(Node(b"B"), 3)
    items = list(table)

    assert table.find_next_highest(0) is items[0]
    for i, item in enumerate(items[:-1]):
        assert table.find_next_highest(item.hash) is items[i + 1]
        assert table.find_next_highest(item.hash - 1) is item


def test_find_owner_wraps_past_the_end():
    table = PositionTable()
    table.add_replicas(Node(b"A"), 3)
    table.add_replicas(Node(b"B"), 3)
    items = list(table)
    assert table.find_owner(items[-1].hash) is items[0].node
    assert table.find_owner(2 ** 64 - 1) is items[0].node


def test_empty_table():
    with pytest.raises(NotFound):
        PositionTable().find_owner(42)
