# models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class NodeReading:
    """CPU readings of a single TiKV node, captured once per observation window."""

    node_id: str
    raftstore_cpu: float  # write path, percent
    coprocessor_cpu: float  # read path, percent


@dataclass(frozen=True)
class DimensionStats:
    max: float = 0.0
    avg: float = 0.0
    node_id: str = ""  # first node attaining max

    def to_dict(self) -> Dict[str, Any]:
        return {"max": self.max, "avg": self.avg, "node_id": self.node_id}


@dataclass
class Snapshot:
    """
    The fact store handed to the rule set.

    Callers fill in the readings and the toggles; the statistics fields are
    populated by the aggregator and the verdict fields by the rules. Do not
    share one Snapshot between concurrent evaluations.
    """

    nodes: List[NodeReading] = field(default_factory=list)
    check_write_hotspot: bool = False
    check_read_hotspot: bool = False
    is_non_clustered_index_hotspot: bool = False

    # Derived statistics
    write_stats: Optional[DimensionStats] = None
    read_stats: Optional[DimensionStats] = None

    # Verdict
    write_hotspot_detected: bool = False
    write_hotspot_ratio: float = 0.0
    read_hotspot_detected: bool = False
    read_hotspot_ratio: float = 0.0
    recommend_shard_row_id_bits: bool = False
    shard_row_id_bits: int = 0  # 0-15

    @property
    def write_hotspot_node(self) -> str:
        return self.write_stats.node_id if self.write_stats else ""

    @property
    def read_hotspot_node(self) -> str:
        return self.read_stats.node_id if self.read_stats else ""

    def reset_verdict(self) -> None:
        self.write_hotspot_detected = False
        self.write_hotspot_ratio = 0.0
        self.read_hotspot_detected = False
        self.read_hotspot_ratio = 0.0
        self.recommend_shard_row_id_bits = False
        self.shard_row_id_bits = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [
                {
                    "node_id": n.node_id,
                    "raftstore_cpu": n.raftstore_cpu,
                    "coprocessor_cpu": n.coprocessor_cpu,
                }
                for n in self.nodes
            ],
            "check_write_hotspot": self.check_write_hotspot,
            "check_read_hotspot": self.check_read_hotspot,
            "is_non_clustered_index_hotspot": self.is_non_clustered_index_hotspot,
            "statistics": {
                "write": self.write_stats.to_dict() if self.write_stats else None,
                "read": self.read_stats.to_dict() if self.read_stats else None,
            },
            "verdict": {
                "write_hotspot_detected": self.write_hotspot_detected,
                "write_hotspot_ratio": self.write_hotspot_ratio,
                "write_hotspot_node": self.write_hotspot_node if self.write_hotspot_detected else None,
                "read_hotspot_detected": self.read_hotspot_detected,
                "read_hotspot_ratio": self.read_hotspot_ratio,
                "read_hotspot_node": self.read_hotspot_node if self.read_hotspot_detected else None,
                "recommend_shard_row_id_bits": self.recommend_shard_row_id_bits,
                "shard_row_id_bits": self.shard_row_id_bits,
            },
        }
