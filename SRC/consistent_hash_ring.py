"""Consistent hashing ring over SHA-1 placement values.
- Virtual replicas per node (ring-wide count, fixed at construction)
- Sorted position table for O(log N) lookups via bisect
- All-or-nothing node addition with rollback
- Not thread-safe: callers serialize mutations with their own lock
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional
import copy
import logging

try:
    import xxhash
except ImportError as e:
    raise RuntimeError("xxhash is required. Install with: pip install xxhash") from e

from hash_ring_errors import HashRingError, InvalidArgument, ResourceExhausted
from node_registry import KeyLike, Node, NodeRegistry, as_key
from position_table import Item, PositionTable, placement

log = logging.getLogger(__name__)

def h64(data: bytes, seed: int = 0) -> int:
    return xxhash.xxh3_64_intdigest(data, seed=seed)

def _printable(key: bytes) -> str:
    return key.decode("utf-8", errors="backslashreplace")


class ConsistentHasher:
    """Consistent hashing ring with a fixed number of virtual replicas per node."""
    def __init__(self, num_replicas: int):
        if isinstance(num_replicas, bool) or not isinstance(num_replicas, int) or num_replicas < 1:
            raise InvalidArgument(f"num_replicas must be an integer >= 1, got {num_replicas!r}")
        self._num_replicas = num_replicas
        self._nodes = NodeRegistry()
        self._table = PositionTable()

    @property
    def num_replicas(self) -> int:
        return self._num_replicas

    def _rollback(self, node: Node) -> None:
        self._table.remove_replicas(node)
        self._nodes.remove(node.key)
        log.warning("rolled back add of node=%s", _printable(node.key))

    def add_node(self, key: KeyLike) -> None:
        try:
            node = self._nodes.add(key)
        except MemoryError as e:
            raise ResourceExhausted(f"cannot allocate node {key!r}") from e
        try:
            self._table.add_replicas(node, self._num_replicas)
        except HashRingError:
            self._rollback(node)
            raise
        except MemoryError as e:
            self._rollback(node)
            raise ResourceExhausted(f"cannot allocate replicas for node {key!r}") from e
        except BaseException:
            self._rollback(node)
            raise
        log.debug("added node=%s replicas=%d", _printable(node.key), self._num_replicas)

    def remove_node(self, key: KeyLike) -> None:
        node = self._nodes.remove(key)
        purged = self._table.remove_replicas(node)
        log.debug("removed node=%s replicas=%d", _printable(node.key), purged)

    def find_node(self, key: KeyLike) -> Optional[Node]:
        return self._nodes.find(key)

    def find_next_highest(self, value: int) -> Item:
        return self._table.find_next_highest(value)

    def route(self, key: KeyLike) -> bytes:
        """Return the key of the node owning ``key``; NotFound on an empty ring."""
        return self._table.find_owner(placement(as_key(key))).key

    def nodes(self) -> List[bytes]:
        return [node.key for node in self._nodes]

    def size(self) -> int:
        return len(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: KeyLike) -> bool:
        return key in self._nodes

    def dump(self) -> Dict[str, Any]:
        return {
            "num_replicas": self._num_replicas,
            "nodes": self.nodes(),
            "items": [(item.hash, item.node.key) for item in self._table],
        }

    def format_dump(self) -> str:
        state = self.dump()
        lines = ["-" * 40, "hash_ring", "", f"numReplicas:{state['num_replicas']:8d}", "Nodes:", ""]
        lines += [f"{i}: {_printable(key)}" for i, key in enumerate(state["nodes"])]
        lines += ["", f"Items ({len(state['items'])}):", ""]
        lines += [f"{h} : {_printable(key)}" for h, key in state["items"]]
        lines += ["", "-" * 40]
        return "\n".join(lines)

    def stats(self) -> Dict[str, int]:
        return {"nodes": len(self._nodes), "tokens": len(self._table), "num_replicas": self._num_replicas}

    def fingerprint(self, seed: int = 0) -> int:
        """xxh3_64 over the node set and the sorted table; equal rings give equal values."""
        parts = [self._num_replicas.to_bytes(4, "big")]
        for key in sorted(self.nodes()):
            parts.append(len(key).to_bytes(4, "big") + key)
        for item in self._table:
            parts.append(item.hash.to_bytes(8, "big") + len(item.node.key).to_bytes(4, "big") + item.node.key)
        return h64(b"".join(parts), seed)

    def clone(self) -> "ConsistentHasher":
        """Deep clone the ring for before/after comparison """
        return copy.deepcopy(self)
