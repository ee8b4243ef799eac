import time
from fastapi import FastAPI, Request, Response
from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# --- Metric objects ---
REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["path", "method", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "Request latency seconds",
    labelnames=["path", "method"],
)
UPSTREAM_REQUESTS = Counter(
    "upstream_requests_total",
    "GET requests issued to the upstream catalog",
    labelnames=["outcome"],
)


# --- Public helpers ---
def record_upstream(outcome: str) -> None:
    UPSTREAM_REQUESTS.labels(outcome=outcome).inc()


UNMATCHED_PATH = "<unmatched>"


def _route_path(request: Request) -> str:
    # Route template, so /personaje/{nombre} is one series and 404s share one
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


# --- Installation: middleware + /metrics endpoint ---
def install(app: FastAPI) -> None:
    @app.middleware("http")
    async def _metrics_mw(request: Request, call_next):
        t0 = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            dur = time.perf_counter() - t0
            path = _route_path(request)
            REQUEST_LATENCY.labels(path=path, method=request.method).observe(dur)
            REQUESTS.labels(path=path, method=request.method, status=str(status)).inc()

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
