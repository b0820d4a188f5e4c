"""Tests for the hotspot decision engine and advice."""

import pytest
from prometheus_client import REGISTRY

from advice import hotspot_recommendations
from config import BUNDLED_RULE_FILE
from engine import HotspotDecisionEngine, build_engine
from errors import EvaluationError
from models import NodeReading, Snapshot
from ruleset import RuleSet


@pytest.fixture
def engine():
    return build_engine([BUNDLED_RULE_FILE], "TiDBHotspot", "1.0.0")


def make_snapshot(write, read=None, **flags):
    read = read or [25.0] * len(write)
    return Snapshot(
        nodes=[NodeReading(f"tikv-{i + 1}", w, r) for i, (w, r) in enumerate(zip(write, read))],
        **flags,
    )


def verdict(snapshot):
    return snapshot.to_dict()["verdict"]


def test_scenario_a_write_hotspot(engine):
    snapshot = make_snapshot([30.5, 32.1, 85.2, 29.8, 31.2], check_write_hotspot=True)
    result = engine.evaluate(snapshot)

    assert result is snapshot
    assert snapshot.write_stats.avg == pytest.approx(41.76)
    assert snapshot.write_stats.max == 85.2
    assert snapshot.write_hotspot_ratio == pytest.approx(2.04, abs=0.01)
    assert snapshot.write_hotspot_detected is True
    assert snapshot.write_hotspot_node == "tikv-3"
    # not a non-clustered index workload
    assert snapshot.recommend_shard_row_id_bits is False


def test_scenario_b_no_hotspot(engine):
    snapshot = make_snapshot([30.5, 32.1, 31.8, 29.8, 31.2], check_write_hotspot=True)
    engine.evaluate(snapshot)

    assert snapshot.write_stats.max / snapshot.write_stats.avg == pytest.approx(1.03, abs=0.01)
    assert snapshot.write_hotspot_detected is False
    assert snapshot.write_hotspot_ratio == 0.0


def test_scenario_c_below_threshold_no_recommendation(engine):
    snapshot = make_snapshot(
        [30.0, 32.0, 45.0, 29.0, 31.0],
        check_write_hotspot=True,
        check_read_hotspot=True,
        is_non_clustered_index_hotspot=True,
    )
    engine.evaluate(snapshot)

    assert snapshot.write_stats.avg == pytest.approx(33.4)
    assert snapshot.write_stats.max / snapshot.write_stats.avg == pytest.approx(1.347, abs=0.001)
    assert snapshot.write_hotspot_detected is False
    assert snapshot.recommend_shard_row_id_bits is False
    assert snapshot.shard_row_id_bits == 0


def test_write_and_read_hotspot_together(engine):
    snapshot = make_snapshot(
        [30.5, 32.1, 85.2, 29.8, 31.2],
        [25.3, 28.7, 22.1, 26.5, 90.4],
        check_write_hotspot=True,
        check_read_hotspot=True,
    )
    engine.evaluate(snapshot)

    assert snapshot.write_hotspot_detected is True
    assert snapshot.read_hotspot_detected is True
    assert snapshot.read_hotspot_node == "tikv-5"
    assert snapshot.read_hotspot_ratio == pytest.approx(90.4 / 38.6)


def test_non_clustered_index_hotspot_recommends_shard_bits(engine):
    snapshot = make_snapshot(
        [25.3, 28.7, 95.8, 26.2, 27.5],
        check_write_hotspot=True,
        check_read_hotspot=True,
        is_non_clustered_index_hotspot=True,
    )
    engine.evaluate(snapshot)

    assert snapshot.write_hotspot_detected is True
    assert snapshot.recommend_shard_row_id_bits is True
    assert snapshot.shard_row_id_bits == 2


@pytest.mark.parametrize("hot", [60.0, 85.0, 400.0, 10000.0])
def test_clustered_hotspot_never_gets_shard_bits(engine, hot):
    snapshot = make_snapshot([30.0, 32.0, hot, 29.0, 31.0], check_write_hotspot=True,
                             is_non_clustered_index_hotspot=False)
    engine.evaluate(snapshot)

    assert snapshot.write_hotspot_detected is True
    assert snapshot.recommend_shard_row_id_bits is False
    assert snapshot.shard_row_id_bits == 0


def test_read_toggle_off_leaves_read_verdict_at_default(engine):
    snapshot = make_snapshot(
        [30.5, 32.1, 85.2, 29.8, 31.2],
        [1.0, 1.0, 1.0, 1.0, 99.0],
        check_write_hotspot=True,
        check_read_hotspot=False,
    )
    engine.evaluate(snapshot)

    assert snapshot.write_hotspot_detected is True
    assert snapshot.read_hotspot_detected is False
    assert snapshot.read_hotspot_ratio == 0.0


def test_exact_threshold_fires(engine):
    snapshot = make_snapshot([15.0, 5.0, 10.0], check_write_hotspot=True)
    engine.evaluate(snapshot)

    assert snapshot.write_hotspot_detected is True
    assert snapshot.write_hotspot_ratio == 1.5


def test_empty_snapshot_degrades(engine):
    snapshot = Snapshot(nodes=[], check_write_hotspot=True, check_read_hotspot=True,
                        is_non_clustered_index_hotspot=True)
    engine.evaluate(snapshot)

    assert snapshot.write_stats.max == 0.0
    assert snapshot.write_stats.node_id == ""
    assert snapshot.write_hotspot_detected is False
    assert snapshot.read_hotspot_detected is False
    assert snapshot.recommend_shard_row_id_bits is False
    assert hotspot_recommendations(snapshot) == ["ℹ️ No TiKV node readings in snapshot; nothing to analyze."]


def test_evaluation_is_idempotent(engine):
    snapshot = make_snapshot(
        [25.3, 28.7, 95.8, 26.2, 27.5],
        [25.3, 28.7, 22.1, 26.5, 90.4],
        check_write_hotspot=True,
        check_read_hotspot=True,
        is_non_clustered_index_hotspot=True,
    )
    first = verdict(engine.evaluate(snapshot))
    second = verdict(engine.evaluate(snapshot))

    assert first == second


def test_reevaluation_after_readings_change(engine):
    snapshot = make_snapshot([30.0, 31.0, 32.0], check_write_hotspot=True,
                             is_non_clustered_index_hotspot=True)
    engine.evaluate(snapshot)
    assert snapshot.write_hotspot_detected is False

    snapshot.nodes[1] = NodeReading("tikv-2", 95.0, 25.0)
    engine.evaluate(snapshot)
    assert snapshot.write_hotspot_detected is True
    assert snapshot.write_hotspot_node == "tikv-2"
    assert snapshot.recommend_shard_row_id_bits is True

    # hotspot cools down; nothing from the previous tick may survive
    snapshot.nodes[1] = NodeReading("tikv-2", 31.0, 25.0)
    engine.evaluate(snapshot)
    assert snapshot.write_hotspot_detected is False
    assert snapshot.write_hotspot_ratio == 0.0
    assert snapshot.recommend_shard_row_id_bits is False
    assert snapshot.shard_row_id_bits == 0


def test_independent_engines_and_snapshots(engine):
    other = build_engine([BUNDLED_RULE_FILE], "TiDBHotspot", "1.0.0")
    hot = make_snapshot([30.0, 85.0, 31.0], check_write_hotspot=True)
    calm = make_snapshot([30.0, 31.0, 32.0], check_write_hotspot=True)

    engine.evaluate(hot)
    other.evaluate(calm)

    assert hot.write_hotspot_detected is True
    assert calm.write_hotspot_detected is False


def test_evaluation_fault_propagates_and_is_counted():
    class BrokenRuleSet(RuleSet):
        def evaluate(self, snapshot):
            raise EvaluationError("fact missing")

    before = REGISTRY.get_sample_value("hotspot_evaluations_total", {"result": "fault"}) or 0.0
    engine = HotspotDecisionEngine(BrokenRuleSet(name="broken", version="0", rules=()))

    with pytest.raises(EvaluationError):
        engine.evaluate(make_snapshot([10.0, 10.0], check_write_hotspot=True))

    after = REGISTRY.get_sample_value("hotspot_evaluations_total", {"result": "fault"})
    assert after == before + 1


def test_metrics_count_detections(engine):
    before = REGISTRY.get_sample_value("hotspots_detected_total", {"dimension": "write"}) or 0.0
    engine.evaluate(make_snapshot([30.0, 85.0, 31.0], check_write_hotspot=True))

    assert REGISTRY.get_sample_value("hotspots_detected_total", {"dimension": "write"}) == before + 1


def test_evaluate_with_log_prints_verdict(engine, capsys):
    snapshot = make_snapshot([25.3, 28.7, 95.8, 26.2, 27.5], check_write_hotspot=True,
                             is_non_clustered_index_hotspot=True)
    engine.evaluate_with_log(snapshot)

    out = capsys.readouterr().out
    assert "TiDBHotspot" in out
    assert "Write hotspot on tikv-3" in out
    assert "SHARD_ROW_ID_BITS=2" in out


def test_recommendations_for_non_clustered_hotspot(engine):
    snapshot = make_snapshot(
        [25.3, 28.7, 95.8, 26.2, 27.5],
        check_write_hotspot=True,
        check_read_hotspot=True,
        is_non_clustered_index_hotspot=True,
    )
    recos = hotspot_recommendations(engine.evaluate(snapshot))

    assert recos[0].startswith("⚠️ Write hotspot on tikv-3")
    assert "ALTER TABLE table_name SHARD_ROW_ID_BITS = 2;" in recos[1]
    assert recos[2].startswith("✅ No read hotspot")


def test_recommendations_for_clustered_hotspot(engine):
    snapshot = make_snapshot([30.0, 32.0, 85.0, 29.0, 31.0], check_write_hotspot=True)
    recos = hotspot_recommendations(engine.evaluate(snapshot))

    assert len(recos) == 2
    assert "SHARD_ROW_ID_BITS will not help" in recos[1]


def test_recommendations_when_checks_disabled(engine):
    snapshot = make_snapshot([30.0, 85.0, 31.0])
    recos = hotspot_recommendations(engine.evaluate(snapshot))

    assert recos == ["ℹ️ Write and read hotspot checks are both disabled."]
