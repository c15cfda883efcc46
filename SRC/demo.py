from consistent_hash_ring import ConsistentHasher
from rebalance import RebalancePlanner
import argparse
import logging

def main(argv=None):
    parser = argparse.ArgumentParser(description="Build a ring, route a key, remove a node, route again.")
    parser.add_argument("--replicas", type=int, default=3)
    parser.add_argument("--nodes", nargs="+", default=["A", "B"])
    parser.add_argument("--key", default="hello")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    ring = ConsistentHasher(args.replicas)
    for nid in args.nodes:
        ring.add_node(nid)
    print(ring.format_dump())
    print(f"route({args.key!r}) -> {ring.route(args.key)!r}")

    # Snapshot ring BEFORE removing the first node
    ring_before = ring.clone()
    ring.remove_node(args.nodes[0])
    print(ring.format_dump())

    keys = [f"key-{i}" for i in range(200)]
    planner = RebalancePlanner()
    plan = planner.plan_moved(keys, ring_before, ring)
    print("Moved stats:", planner.stats(plan))
    if len(ring):
        print(f"route({args.key!r}) -> {ring.route(args.key)!r}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
