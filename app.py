# app.py
import time
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

# Prometheus metrics
from prometheus_client import Counter, Gauge, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST

from advice import hotspot_recommendations
from config import HOTSPOT_RULE_NAME, HOTSPOT_RULE_VERSION, SERVICE_NAME, VERSION, rule_files
from engine import HotspotDecisionEngine, build_engine
from errors import ConfigurationError, EvaluationFault
from models import NodeReading, Snapshot

# =============================================================================
# PROMETHEUS METRICS
# =============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests received',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint']
)

http_requests_in_progress = Gauge(
    'http_requests_in_progress',
    'Number of HTTP requests currently being processed'
)

service_info = Info(
    'service',
    'Service information'
)
service_info.info({
    'name': SERVICE_NAME,
    'version': VERSION
})

rule_set_loaded = Gauge(
    'hotspot_rule_set_loaded',
    'Rule set compilation status (1=loaded, 0=not loaded)'
)

# =============================================================================

app = FastAPI(title="TiDB Hotspot Advisor")

# Bound once at startup; one engine per compiled rule set.
_ENGINE: Optional[HotspotDecisionEngine] = None
_STARTUP_ERROR: Optional[str] = None


@app.middleware("http")
async def prometheus_middleware(request: Request, call_next):
    """Track request count, latency and in-flight requests."""
    if request.url.path == "/metrics":
        return await call_next(request)

    http_requests_in_progress.inc()
    start_time = time.time()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        http_requests_total.labels(
            method=request.method,
            endpoint=request.url.path,
            status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=request.url.path
        ).observe(time.time() - start_time)
        http_requests_in_progress.dec()


# -----------------------------
# Rule set init
# -----------------------------
@app.on_event("startup")
async def startup_event():
    global _ENGINE, _STARTUP_ERROR
    files = rule_files()
    try:
        _ENGINE = build_engine(files, HOTSPOT_RULE_NAME, HOTSPOT_RULE_VERSION)
    except ConfigurationError as e:
        _STARTUP_ERROR = str(e)
        rule_set_loaded.set(0)
        print(f"❌ Rule set {HOTSPOT_RULE_NAME} v{HOTSPOT_RULE_VERSION} failed to load: {e}")
        raise
    _STARTUP_ERROR = None
    rule_set_loaded.set(1)
    print(f"✓ Rule set {HOTSPOT_RULE_NAME} v{HOTSPOT_RULE_VERSION} loaded from {len(files)} file(s): "
          f"{', '.join(_ENGINE.rule_set.rule_names())}")


def get_engine() -> HotspotDecisionEngine:
    if _ENGINE is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_STARTUP_ERROR or "Rule set not loaded",
        )
    return _ENGINE


# -----------------------------
# Schemas
# -----------------------------
class NodeReadingIn(BaseModel):
    node_id: str = Field(min_length=1)
    raftstore_cpu: float = Field(ge=0, allow_inf_nan=False)
    coprocessor_cpu: float = Field(ge=0, allow_inf_nan=False)


class SnapshotIn(BaseModel):
    nodes: List[NodeReadingIn]
    check_write_hotspot: bool = True
    check_read_hotspot: bool = True
    is_non_clustered_index_hotspot: bool = False

    @field_validator("nodes")
    @classmethod
    def unique_node_ids(cls, nodes: List[NodeReadingIn]) -> List[NodeReadingIn]:
        ids = [n.node_id for n in nodes]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate node_id(s): {', '.join(dupes)}")
        return nodes

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            nodes=[NodeReading(n.node_id, n.raftstore_cpu, n.coprocessor_cpu) for n in self.nodes],
            check_write_hotspot=self.check_write_hotspot,
            check_read_hotspot=self.check_read_hotspot,
            is_non_clustered_index_hotspot=self.is_non_clustered_index_hotspot,
        )


class HealthResponse(BaseModel):
    status: str              # "ok" | "not_ready"
    service: str
    version: str
    time: float
    rule_set: dict


@app.get("/health/live", response_model=HealthResponse, tags=["health"])
def live():
    """Liveness: process is up and responsive."""
    return HealthResponse(
        status="ok",
        service=SERVICE_NAME,
        version=VERSION,
        time=time.time(),
        rule_set={"name": HOTSPOT_RULE_NAME, "version": HOTSPOT_RULE_VERSION},
    )


@app.get("/health/ready", response_model=HealthResponse, tags=["health"])
def ready():
    """Readiness: the rule set compiled and an engine is bound."""
    loaded = _ENGINE is not None
    return HealthResponse(
        status="ok" if loaded else "not_ready",
        service=SERVICE_NAME,
        version=VERSION,
        time=time.time(),
        rule_set={
            "name": HOTSPOT_RULE_NAME,
            "version": HOTSPOT_RULE_VERSION,
            "loaded": loaded,
            "error": None if loaded else (_STARTUP_ERROR or "Rule set not loaded"),
        },
    )


@app.get("/metrics", tags=["monitoring"])
def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@app.get("/hotspots/rules", summary="Describe the loaded rule set")
def describe_rules(engine: HotspotDecisionEngine = Depends(get_engine)):
    return engine.rule_set.describe()


@app.post(
    "/hotspots/analyze",
    summary="Evaluate one TiKV CPU snapshot and return hotspot verdict and advice",
)
def analyze_snapshot(body: SnapshotIn, engine: HotspotDecisionEngine = Depends(get_engine)):
    snapshot = body.to_snapshot()
    try:
        engine.evaluate(snapshot)
    except EvaluationFault as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Rule evaluation failed: {e}",
        ) from e

    result = snapshot.to_dict()
    result["rule_set"] = {"name": engine.rule_set.name, "version": engine.rule_set.version}
    result["recommendations"] = hotspot_recommendations(snapshot)
    return result
