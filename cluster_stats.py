# cluster_stats.py
from typing import Callable, List

from models import DimensionStats, NodeReading, Snapshot


def _dimension_stats(nodes: List[NodeReading], value: Callable[[NodeReading], float]) -> DimensionStats:
    """Max, mean and first-occurrence argmax of one metric over the nodes."""
    if not nodes:
        return DimensionStats()

    total = 0.0
    top = nodes[0]
    for node in nodes:
        total += value(node)
        # strict '>' keeps the first node on ties
        if value(node) > value(top):
            top = node

    return DimensionStats(max=value(top), avg=total / len(nodes), node_id=top.node_id)


def calculate_statistics(snapshot: Snapshot) -> Snapshot:
    """
    Recompute the cluster-wide statistics of a snapshot from its current readings.

    An empty node list is not an error: both dimensions degrade to zero with
    no hotspot node, so no rule can declare a hotspot.
    """
    snapshot.write_stats = _dimension_stats(snapshot.nodes, lambda n: n.raftstore_cpu)
    snapshot.read_stats = _dimension_stats(snapshot.nodes, lambda n: n.coprocessor_cpu)
    return snapshot
