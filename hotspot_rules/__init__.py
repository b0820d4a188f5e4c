from .base import HotspotRule
from .ratio_rules import ReadHotspotRule, WriteHotspotRule
from .shard_rules import ShardRowIDBitsRule

# Rule names accepted by the rule resource.
RULE_TYPES = {
    WriteHotspotRule.name: WriteHotspotRule,
    ReadHotspotRule.name: ReadHotspotRule,
    ShardRowIDBitsRule.name: ShardRowIDBitsRule,
}

__all__ = [
    "HotspotRule",
    "WriteHotspotRule",
    "ReadHotspotRule",
    "ShardRowIDBitsRule",
    "RULE_TYPES",
]
