"""Sorted table of replica positions; this is the ring proper.

- Placement values are the 4th and 5th 32-bit words of a SHA-1 digest
- Replicas for a node are appended in batch, then the table is re-sorted
- Lookup is a binary search for the next-highest position, wrapping at the end
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List
import bisect
import hashlib

from hash_ring_errors import HashFailure, NotFound
from node_registry import Node


def placement(data: bytes) -> int:
    try:
        digest = hashlib.sha1(data, usedforsecurity=False).digest()
    except (ValueError, TypeError) as e:
        raise HashFailure(f"sha1 digest failed for {data!r}") from e
    # words [3] and [4] of the five big-endian digest words
    return int.from_bytes(digest[12:20], "big")


def replica_placement(key: bytes, replica_idx: int) -> int:
    return placement(key + str(replica_idx).encode("ascii"))


@dataclass(frozen=True)
class Item:
    hash: int
    node: Node


class PositionTable:
    def __init__(self):
        self._items: List[Item] = []
        self._sorted_tokens: List[int] = []

    def add_replicas(self, node: Node, replicas: int) -> None:
        # nothing is appended until every replica hashed successfully
        new_items = [Item(replica_placement(node.key, i), node) for i in range(replicas)]
        self._items.extend(new_items)
        self._items.sort(key=lambda item: item.hash)
        self._sorted_tokens = [item.hash for item in self._items]

    def remove_replicas(self, node: Node) -> int:
        before = len(self._items)
        self._items = [item for item in self._items if item.node is not node]
        self._sorted_tokens = [item.hash for item in self._items]
        return before - len(self._items)

    def find_next_highest(self, value: int) -> Item:
        if not self._items:
            raise NotFound("ring has no positions")
        idx = bisect.bisect_right(self._sorted_tokens, value)
        if idx == len(self._items):
            return self._items[0]
        return self._items[idx]

    def find_owner(self, value: int) -> Node:
        return self.find_next_highest(value).node

    def hashes(self) -> List[int]:
        return list(self._sorted_tokens)

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
