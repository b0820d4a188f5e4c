# advice.py
from typing import List

from models import Snapshot


def hotspot_recommendations(snapshot: Snapshot) -> List[str]:
    """
    Turns an evaluated snapshot into operator advice.
    Call after HotspotDecisionEngine.evaluate().
    """
    if not snapshot.nodes:
        return ["ℹ️ No TiKV node readings in snapshot; nothing to analyze."]

    recos: List[str] = []
    w, r = snapshot.write_stats, snapshot.read_stats

    if snapshot.write_hotspot_detected:
        recos.append(
            f"⚠️ Write hotspot on {w.node_id}: Raftstore CPU {w.max:.2f}% "
            f"(avg {w.avg:.2f}%, {snapshot.write_hotspot_ratio:.2f}x)."
        )
        if snapshot.recommend_shard_row_id_bits:
            bits = snapshot.shard_row_id_bits
            recos.append(
                f"⚠️ Non-clustered index write hotspot. Set SHARD_ROW_ID_BITS={bits} to scatter row IDs: "
                f"ALTER TABLE table_name SHARD_ROW_ID_BITS = {bits};"
            )
        else:
            recos.append(
                "ℹ️ Hotspot is not caused by a non-clustered index; SHARD_ROW_ID_BITS will not help. "
                "Review the key range and region distribution instead."
            )
    elif snapshot.check_write_hotspot:
        recos.append(f"✅ No write hotspot (Raftstore CPU max {w.max:.2f}%, avg {w.avg:.2f}%).")

    if snapshot.read_hotspot_detected:
        recos.append(
            f"⚠️ Read hotspot on {r.node_id}: Coprocessor CPU {r.max:.2f}% "
            f"(avg {r.avg:.2f}%, {snapshot.read_hotspot_ratio:.2f}x)."
        )
    elif snapshot.check_read_hotspot:
        recos.append(f"✅ No read hotspot (Coprocessor CPU max {r.max:.2f}%, avg {r.avg:.2f}%).")

    if not recos:
        recos.append("ℹ️ Write and read hotspot checks are both disabled.")
    return recos
