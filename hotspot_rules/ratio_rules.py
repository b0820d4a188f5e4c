# hotspot_rules/ratio_rules.py
import math
from abc import abstractmethod
from typing import Any, Dict, Optional

from models import DimensionStats, Snapshot
from .base import HotspotRule

COMPARISONS = ("inclusive", "strict")


class _RatioHotspotRule(HotspotRule):
    """
    Flags a hotspot when the busiest node runs at ratio_threshold times the
    cluster average or more on one CPU dimension.

    comparison="inclusive" fires at exactly the threshold, "strict" only above it.
    """

    def __init__(self,
                 ratio_threshold: float = 1.5,
                 comparison: str = "inclusive"):
        if isinstance(ratio_threshold, bool) or not isinstance(ratio_threshold, (int, float)):
            raise ValueError(f"ratio_threshold must be a number, got {ratio_threshold!r}")
        if not math.isfinite(ratio_threshold) or ratio_threshold <= 0:
            raise ValueError(f"ratio_threshold must be a finite number > 0, got {ratio_threshold}")
        if comparison not in COMPARISONS:
            raise ValueError(f"comparison must be one of {COMPARISONS}, got {comparison!r}")
        self.ratio_threshold = float(ratio_threshold)
        self.comparison = comparison

    @abstractmethod
    def _enabled(self, snapshot: Snapshot) -> bool: ...
    @abstractmethod
    def _stats(self, snapshot: Snapshot) -> Optional[DimensionStats]: ...

    def _meets(self, ratio: float) -> bool:
        if self.comparison == "strict":
            return ratio > self.ratio_threshold
        return ratio >= self.ratio_threshold

    def when(self, snapshot: Snapshot) -> bool:
        stats = self._stats(snapshot)
        if not self._enabled(snapshot) or stats.avg <= 0:
            return False
        return self._meets(stats.max / stats.avg)

    def params(self) -> Dict[str, Any]:
        return {"ratio_threshold": self.ratio_threshold, "comparison": self.comparison}


class WriteHotspotRule(_RatioHotspotRule):
    name = "DetectWriteHotspot"

    def _enabled(self, snapshot: Snapshot) -> bool:
        return snapshot.check_write_hotspot

    def _stats(self, snapshot: Snapshot) -> Optional[DimensionStats]:
        return snapshot.write_stats

    def then(self, snapshot: Snapshot) -> None:
        stats = snapshot.write_stats
        snapshot.write_hotspot_detected = True
        snapshot.write_hotspot_ratio = stats.max / stats.avg


class ReadHotspotRule(_RatioHotspotRule):
    name = "DetectReadHotspot"

    def _enabled(self, snapshot: Snapshot) -> bool:
        return snapshot.check_read_hotspot

    def _stats(self, snapshot: Snapshot) -> Optional[DimensionStats]:
        return snapshot.read_stats

    def then(self, snapshot: Snapshot) -> None:
        stats = snapshot.read_stats
        snapshot.read_hotspot_detected = True
        snapshot.read_hotspot_ratio = stats.max / stats.avg
