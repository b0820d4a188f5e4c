# hotspot_rules/shard_rules.py
import math
from typing import Any, Callable, Dict

from models import Snapshot
from .base import HotspotRule

MAX_SHARD_ROW_ID_BITS = 15

# Both mappings are monotonically non-decreasing in the write hotspot ratio.
SHARD_BITS_STRATEGIES: Dict[str, Callable[[float], int]] = {
    "log2": lambda ratio: math.ceil(math.log2(ratio)) if ratio > 0 else 0,
    "ratio": lambda ratio: math.ceil(ratio),
}


def clamp_shard_bits(bits: int, max_bits: int = MAX_SHARD_ROW_ID_BITS) -> int:
    return max(0, min(max_bits, bits))


class ShardRowIDBitsRule(HotspotRule):
    """
    Recommends SHARD_ROW_ID_BITS for a write hotspot caused by a
    non-clustered index workload (monotonically increasing row ids).

    A hotspot on a clustered / range-key workload gets no recommendation:
    scattering row ids does not move its writes.

    Expected to run after DetectWriteHotspot within the same pass.
    """

    name = "RecommendShardRowIDBits"

    def __init__(self,
                 strategy: str = "log2",
                 max_bits: int = MAX_SHARD_ROW_ID_BITS):
        if strategy not in SHARD_BITS_STRATEGIES:
            raise ValueError(
                f"unknown strategy {strategy!r}, expected one of {sorted(SHARD_BITS_STRATEGIES)}"
            )
        if isinstance(max_bits, bool) or not isinstance(max_bits, int):
            raise ValueError(f"max_bits must be an integer, got {max_bits!r}")
        if not 0 <= max_bits <= MAX_SHARD_ROW_ID_BITS:
            raise ValueError(f"max_bits must be within [0, {MAX_SHARD_ROW_ID_BITS}], got {max_bits}")
        self.strategy = strategy
        self.max_bits = max_bits

    def when(self, snapshot: Snapshot) -> bool:
        return snapshot.write_hotspot_detected and snapshot.is_non_clustered_index_hotspot

    def then(self, snapshot: Snapshot) -> None:
        bits = SHARD_BITS_STRATEGIES[self.strategy](snapshot.write_hotspot_ratio)
        snapshot.recommend_shard_row_id_bits = True
        snapshot.shard_row_id_bits = clamp_shard_bits(bits, self.max_bits)

    def params(self) -> Dict[str, Any]:
        return {"strategy": self.strategy, "max_bits": self.max_bits}
