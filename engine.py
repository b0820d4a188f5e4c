# engine.py
import time
from typing import Sequence

from cluster_stats import calculate_statistics
from errors import EvaluationFault
from metrics import (
    hotspot_evaluation_duration_seconds,
    hotspot_evaluations_total,
    hotspots_detected_total,
    shard_row_id_bits_recommendations_total,
)
from models import Snapshot
from ruleset import RuleSet, compile_rule_files


class HotspotDecisionEngine:
    """
    Aggregates a snapshot's readings and runs the bound rule set over it.

    The engine keeps no per-evaluation state; the verdict is written onto
    the snapshot passed in.
    """

    def __init__(self, rule_set: RuleSet):
        self.rule_set = rule_set

    def evaluate(self, snapshot: Snapshot) -> Snapshot:
        start = time.time()
        calculate_statistics(snapshot)
        snapshot.reset_verdict()
        try:
            self.rule_set.evaluate(snapshot)
        except EvaluationFault:
            hotspot_evaluations_total.labels(result="fault").inc()
            raise
        finally:
            hotspot_evaluation_duration_seconds.observe(time.time() - start)

        hotspot_evaluations_total.labels(result="ok").inc()
        if snapshot.write_hotspot_detected:
            hotspots_detected_total.labels(dimension="write").inc()
        if snapshot.read_hotspot_detected:
            hotspots_detected_total.labels(dimension="read").inc()
        if snapshot.recommend_shard_row_id_bits:
            shard_row_id_bits_recommendations_total.inc()
        return snapshot

    def evaluate_with_log(self, snapshot: Snapshot) -> Snapshot:
        print(f"\n⚙️ Running rule set {self.rule_set.name} v{self.rule_set.version} "
              f"on {len(snapshot.nodes)} TiKV node(s)...")
        self.evaluate(snapshot)
        w, r = snapshot.write_stats, snapshot.read_stats
        print(f"   Write: max={w.max:.2f}% avg={w.avg:.2f}% node={w.node_id or '-'}")
        print(f"   Read:  max={r.max:.2f}% avg={r.avg:.2f}% node={r.node_id or '-'}")
        if snapshot.write_hotspot_detected:
            print(f"   ✓ Write hotspot on {snapshot.write_hotspot_node} ({snapshot.write_hotspot_ratio:.2f}x avg)")
        if snapshot.read_hotspot_detected:
            print(f"   ✓ Read hotspot on {snapshot.read_hotspot_node} ({snapshot.read_hotspot_ratio:.2f}x avg)")
        if snapshot.recommend_shard_row_id_bits:
            print(f"   ⚠️ Recommend SHARD_ROW_ID_BITS={snapshot.shard_row_id_bits}")
        if not (snapshot.write_hotspot_detected or snapshot.read_hotspot_detected):
            print("   ✅ No hotspot detected.")
        return snapshot


def build_engine(rule_files: Sequence[str], name: str, version: str) -> HotspotDecisionEngine:
    """Compile the rule files and bind a fresh engine to the result."""
    return HotspotDecisionEngine(compile_rule_files(rule_files, name, version))
