"""Rebalancing utilities.

Plan owner changes for keys between two ring snapshots.
"""
from __future__ import annotations

from typing import Iterable, Dict, Tuple, Optional, Union
from collections import Counter

from consistent_hash_ring import ConsistentHasher
from hash_ring_errors import NotFound
from node_registry import KeyLike

Move = Tuple[Optional[bytes], Optional[bytes]]

def _owner(ring: ConsistentHasher, key: KeyLike) -> Optional[bytes]:
    try:
        return ring.route(key)
    except NotFound:
        return None

class RebalancePlanner:
    def plan_moved(self, keys: Iterable[KeyLike], ring_before: ConsistentHasher, ring_after: ConsistentHasher) -> Dict[KeyLike, Move]:
        """Return dict key -> (from_owner, to_owner) for keys whose owner changed."""
        moved = {}
        for k in keys:
            b = _owner(ring_before, k)
            a = _owner(ring_after, k)
            if b != a:
                moved[k] = (b, a)
        return moved

    def stats(self, plan: Dict[KeyLike, Move]) -> Dict[str, Union[int, Dict[bytes, int]]]:
        by_to = Counter([to for (_, to) in plan.values() if to is not None])
        by_from = Counter([frm for (frm, _) in plan.values() if frm is not None])
        return {
            "moved_count": len(plan),
            "by_to": dict(by_to),
            "by_from": dict(by_from),
        }
