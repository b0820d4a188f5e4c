# metrics.py
from prometheus_client import Counter, Histogram

# Decision pipeline metrics
hotspot_evaluations_total = Counter(
    'hotspot_evaluations_total',
    'Total snapshot evaluations',
    ['result']
)

hotspots_detected_total = Counter(
    'hotspots_detected_total',
    'Hotspots detected by the rule set',
    ['dimension']
)

shard_row_id_bits_recommendations_total = Counter(
    'shard_row_id_bits_recommendations_total',
    'SHARD_ROW_ID_BITS recommendations issued'
)

hotspot_evaluation_duration_seconds = Histogram(
    'hotspot_evaluation_duration_seconds',
    'Time spent evaluating one snapshot'
)
