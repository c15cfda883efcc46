"""Registry of live ring nodes, keyed by exact key bytes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Union

from hash_ring_errors import DuplicateKey, InvalidArgument, NotFound

KeyLike = Union[bytes, bytearray, memoryview, str]


def as_key(key: KeyLike) -> bytes:
    """Copy a caller key into immutable bytes, rejecting empty keys."""
    if isinstance(key, str):
        data = key.encode("utf-8")
    elif isinstance(key, (bytes, bytearray, memoryview)):
        data = bytes(key)
    else:
        raise InvalidArgument(f"key must be bytes or str, got {type(key).__name__}")
    if not data:
        raise InvalidArgument("key must not be empty")
    return data


@dataclass(frozen=True)
class Node:
    key: bytes

    def __len__(self) -> int:
        return len(self.key)


class NodeRegistry:
    def __init__(self):
        self._nodes: Dict[bytes, Node] = {}

    def add(self, key: KeyLike) -> Node:
        data = as_key(key)
        if data in self._nodes:
            raise DuplicateKey(f"Node {data!r} already exists")
        node = Node(key=data)
        self._nodes[data] = node
        return node

    def remove(self, key: KeyLike) -> Node:
        data = as_key(key)
        node = self._nodes.pop(data, None)
        if node is None:
            raise NotFound(f"Node {data!r} not found")
        return node

    def find(self, key: KeyLike) -> Optional[Node]:
        return self._nodes.get(as_key(key))

    def __contains__(self, key: KeyLike) -> bool:
        try:
            return self.find(key) is not None
        except InvalidArgument:
            return False

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def __len__(self) -> int:
        return len(self._nodes)
