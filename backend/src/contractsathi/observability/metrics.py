"""Prometheus metrics.

HTTP traffic is labelled by route template, never by raw path, so contract
ids do not explode label cardinality. Pipeline counters track how often the
model stages fall back, which is the main operational signal of this service.
"""

import time
from collections.abc import Awaitable, Callable, Iterable

from fastapi import FastAPI, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.responses import Response

METRICS_PATH = "/metrics"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    # Analysis requests wait on two model calls
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120),
)
REQUEST_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "In-progress HTTP requests",
    ["method"],
)
ANALYSIS_RUNS = Counter(
    "contract_analysis_runs_total",
    "Contract analysis pipeline runs",
    ["outcome", "extraction_source"],
)
DEGRADED_STAGES = Counter(
    "contract_degraded_stages_total",
    "Pipeline stages that fell back, by stage and reason",
    ["stage", "reason"],
)
REPORTS_SERVED = Counter(
    "contract_reports_served_total",
    "PDF reports served",
    ["reused"],
)
AI_TOKENS = Counter(
    "ai_tokens_total",
    "Model tokens consumed",
    ["model", "action", "direction"],
)
AI_COST_CENTS = Counter(
    "ai_cost_cents_total",
    "Estimated model cost in US cents",
    ["model", "action"],
)


def record_analysis_run(extraction_source: str, degraded_reasons: Iterable[str]) -> None:
    """Count one finished run and each ``stage:reason`` it degraded on."""
    reasons = list(degraded_reasons)
    outcome = "degraded" if reasons else "ok"
    ANALYSIS_RUNS.labels(outcome=outcome, extraction_source=extraction_source).inc()
    for entry in reasons:
        stage, _, reason = entry.partition(":")
        DEGRADED_STAGES.labels(stage=stage, reason=reason or "unknown").inc()


def record_report(reused: bool) -> None:
    REPORTS_SERVED.labels(reused="true" if reused else "false").inc()


def record_ai_usage(
    model: str, action: str, input_tokens: int, output_tokens: int, cost_cents: float
) -> None:
    AI_TOKENS.labels(model=model, action=action, direction="input").inc(input_tokens)
    AI_TOKENS.labels(model=model, action=action, direction="output").inc(output_tokens)
    AI_COST_CENTS.labels(model=model, action=action).inc(cost_cents)


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) and path else "unmatched"


def setup_metrics(app: FastAPI) -> None:
    """Instrument every request and expose the registry on ``/metrics``."""

    @app.middleware("http")
    async def metrics_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        method = request.method
        status_code = "500"
        REQUEST_IN_PROGRESS.labels(method=method).inc()
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status_code = str(response.status_code)
            return response
        finally:
            path = _route_template(request)
            REQUEST_LATENCY.labels(method=method, path=path).observe(time.perf_counter() - start)
            REQUEST_COUNT.labels(method=method, path=path, status_code=status_code).inc()
            REQUEST_IN_PROGRESS.labels(method=method).dec()

    @app.get(METRICS_PATH, include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
