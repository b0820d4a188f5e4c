#!/usr/bin/env python3
"""
Walks the hotspot advisor through the usual TiKV scenarios and prints
statistics, verdicts and advice for each.

Rule files, name and version come from the same .env settings as the API.
"""

import sys
from dataclasses import replace

from advice import hotspot_recommendations
from config import HOTSPOT_RULE_NAME, HOTSPOT_RULE_VERSION, rule_files
from engine import HotspotDecisionEngine, build_engine
from errors import ConfigurationError
from models import NodeReading, Snapshot


def nodes(*rows):
    return [NodeReading(f"tikv-{i + 1}", w, r) for i, (w, r) in enumerate(rows)]


SCENARIOS = [
    (
        "Write and read hotspot",
        Snapshot(
            nodes=nodes((30.5, 25.3), (32.1, 28.7), (85.2, 22.1), (29.8, 26.5), (31.2, 90.4)),
            check_write_hotspot=True,
            check_read_hotspot=True,
        ),
    ),
    (
        "Non-clustered index write hotspot",
        Snapshot(
            nodes=nodes((25.3, 22.1), (28.7, 24.5), (95.8, 23.2), (26.2, 25.1), (27.5, 24.8)),
            check_write_hotspot=True,
            check_read_hotspot=True,
            is_non_clustered_index_hotspot=True,
        ),
    ),
    (
        "CPU spread below 1.5x (no match)",
        Snapshot(
            nodes=nodes((30.0, 25.0), (32.0, 28.0), (45.0, 22.0), (29.0, 26.0), (31.0, 28.0)),
            check_write_hotspot=True,
            check_read_hotspot=True,
            is_non_clustered_index_hotspot=True,
        ),
    ),
    (
        "Write hotspot on a clustered index (no SHARD_ROW_ID_BITS)",
        Snapshot(
            nodes=nodes((30.0, 25.0), (32.0, 28.0), (85.0, 22.0), (29.0, 26.0), (31.0, 28.0)),
            check_write_hotspot=True,
            check_read_hotspot=True,
        ),
    ),
    (
        "Normal cluster",
        Snapshot(
            nodes=nodes((30.5, 25.3), (32.1, 28.7), (31.8, 27.1), (29.8, 26.5), (31.2, 28.4)),
            check_write_hotspot=True,
            check_read_hotspot=True,
        ),
    ),
]


def print_section(title):
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def run_scenario(engine: HotspotDecisionEngine, title: str, snapshot: Snapshot):
    print_section(title)
    for n in snapshot.nodes:
        print(f"  {n.node_id}: Raftstore CPU={n.raftstore_cpu:.2f}%, Coprocessor CPU={n.coprocessor_cpu:.2f}%")
    engine.evaluate_with_log(snapshot)
    print("\n  Recommendations:")
    for r in hotspot_recommendations(snapshot):
        print("   →", r)


def run_successive_ticks(engine: HotspotDecisionEngine):
    """Re-evaluate one snapshot after its readings change, as a monitor loop would."""
    print_section("Successive monitoring ticks on one snapshot")
    snapshot = Snapshot(
        nodes=nodes((30.5, 25.3), (32.1, 28.7), (31.8, 27.1), (29.8, 26.5), (31.2, 28.4)),
        check_write_hotspot=True,
        is_non_clustered_index_hotspot=True,
    )
    engine.evaluate_with_log(snapshot)

    # tikv-3 starts taking all the inserts
    snapshot.nodes[2] = replace(snapshot.nodes[2], raftstore_cpu=92.0)
    print("\n  tikv-3 Raftstore CPU -> 92.00%")
    engine.evaluate_with_log(snapshot)

    snapshot.nodes[2] = replace(snapshot.nodes[2], raftstore_cpu=31.0)
    print("\n  tikv-3 Raftstore CPU -> 31.00%")
    engine.evaluate_with_log(snapshot)


def main():
    try:
        engine = build_engine(rule_files(), HOTSPOT_RULE_NAME, HOTSPOT_RULE_VERSION)
    except ConfigurationError as e:
        print(f"❌ Failed to load rule set: {e}")
        return 1
    print(f"✓ Rule set {engine.rule_set.name} v{engine.rule_set.version} loaded: "
          f"{', '.join(engine.rule_set.rule_names())}")

    for title, snapshot in SCENARIOS:
        run_scenario(engine, title, snapshot)
    run_successive_ticks(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
