"""FastAPI app, exception handlers, and HTTP routes.

Defines the application instance and the public REST endpoints:

- GET /                    -> redirect to Swagger UI (/docs)
- GET /healthz             -> in-process liveness
- GET /healthcheck         -> upstream reachability
- GET /residentes          -> every planet's residents, tagged with homeworld
- GET /personaje/{nombre}  -> upstream name search, passed through
- GET /personajes          -> all characters, optionally sorted, 10 per page

Every request builds its own upstream client and accumulators; nothing is
shared between requests.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from . import api, metrics, transform
from .errors import ValidationError
from .logging_config import configure_logging
from .schemas import CharactersPage, ErrorOut, HealthcheckOut, Record
from .settings import settings

configure_logging()
log = logging.getLogger(__name__)

RESIDENTS_ERROR = "Error al obtener los residentes de los planetas"
CHARACTERS_ERROR = "Error al obtener los personajes"


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup upstream=%s page_limit=%d", settings.SWAPI_BASE_URL, settings.PAGE_LIMIT)
    yield
    log.info("shutdown")


# ---------------------------------------------------------------------
# App
# ---------------------------------------------------------------------

app = FastAPI(title="SWAPI Gateway", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)
metrics.install(app)


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


@app.exception_handler(ValidationError)
async def validation_error_handler(req: Request, exc: ValidationError):
    log.info("route.bad_request path=%s error=%s", req.url.path, exc)
    return _error(400, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(req: Request, exc: RequestValidationError):
    errors = exc.errors()
    msg = errors[0]["msg"] if errors else "Validation error"
    log.info("route.bad_request path=%s error=%s", req.url.path, msg)
    return _error(400, msg)


_error_resp = {"model": ErrorOut}

# ---------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------


@app.get("/", include_in_schema=False)
async def root():
    """Redirect the root path to the interactive API docs (/docs)."""
    return RedirectResponse(url=app.docs_url or "/docs", status_code=307)


@app.get("/healthz", include_in_schema=False)
async def healthz():
    """Lightweight, in-process health endpoint.

    Always returns 200 if the app can serve requests; never touches the network.
    """
    return {"status": "ok"}


@app.get("/healthcheck", response_model=HealthcheckOut)
async def healthcheck():
    """Report whether the upstream catalog answers."""
    upstream_ok = await api.quick_upstream_probe()
    status = "ok" if upstream_ok else "degraded"
    log.info("route.healthcheck status=%s upstream_ok=%s", status, upstream_ok)
    return {"status": status, "upstream_ok": upstream_ok}


@app.get(
    "/residentes",
    response_model=List[Record],
    responses={500: {"content": {"text/plain": {}}}},
)
async def residentes():
    """Return every planet's residents, unpaginated, grouped by planet name.

    Each resident carries ``homeworld`` set to the planet it was listed under.
    """
    try:
        residents = await api.fetch_all_residents()
    except Exception as exc:
        log.error("route.residentes failed error=%r", exc)
        return PlainTextResponse(RESIDENTS_ERROR, status_code=500)

    log.info("route.residentes returned=%d", len(residents))
    return residents


@app.get(
    "/personaje/{nombre}",
    response_model=List[Record],
    responses={500: _error_resp},
)
async def personaje(nombre: str):
    """Search characters by name upstream and return the matches unchanged."""
    try:
        results = await api.search_characters(nombre)
    except Exception as exc:
        log.error("route.personaje failed nombre=%s error=%r", nombre, exc)
        return _error(500, str(exc))

    log.info("route.personaje nombre=%s returned=%d", nombre, len(results))
    return results


@app.get(
    "/personajes",
    response_model=CharactersPage,
    responses={400: _error_resp, 500: _error_resp},
)
async def personajes(
    ordenar: Optional[str] = Query(None, description="nombre | peso | altura"),
    page: int = Query(1, ge=1),
):
    """Return all characters, optionally sorted, one page of ``PAGE_LIMIT`` at a time.

    ``ordenar`` is validated before any upstream call. When absent (or empty)
    characters keep the upstream order.

    Args:
        ordenar: Sort key, one of ``nombre`` (name), ``peso`` (mass) or
            ``altura`` (height).
        page: 1-based page number.

    Returns:
        ``{"page", "limit", "total", "results"}``.
    """
    field = transform.resolve_sort_field(ordenar) if ordenar else None

    try:
        characters = await api.fetch_all_characters()
        if field is not None:
            characters = transform.sort_characters(characters, field)
        body = transform.paginate(characters, page=page, limit=settings.PAGE_LIMIT)
    except Exception as exc:
        log.error("route.personajes failed ordenar=%s page=%d error=%r", ordenar, page, exc)
        return _error(500, CHARACTERS_ERROR)

    log.info(
        "route.personajes ordenar=%s page=%d returned=%d total=%d",
        ordenar,
        page,
        len(body["results"]),
        body["total"],
    )
    return body


def run() -> None:
    """Serve the app with Uvicorn on the configured host/port."""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
