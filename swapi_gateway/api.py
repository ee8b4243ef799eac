"""External SWAPI client: page fetching, pagination and resident enrichment.

This module encapsulates all interactions with the public Star Wars REST API
(SWAPI). Listing endpoints are paginated with a ``results`` array and a ``next``
cursor URL; the helpers here follow that cursor strictly sequentially, one
request at a time, and flatten the pages into a single list. It also exposes a
quick upstream probe used by the application's health check.

No retries and no caching: any failure aborts the whole aggregation and is
surfaced to the caller as :class:`~swapi_gateway.errors.FetchError`.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from . import metrics
from .errors import FetchError
from .settings import settings
from .transform import locale_key

log = logging.getLogger(__name__)


def _url(path: str) -> str:
    return f"{settings.SWAPI_BASE_URL.rstrip('/')}/{path.lstrip('/')}"


def people_url() -> str:
    return _url("people/")


def planets_url() -> str:
    return _url("planets/")


def build_client() -> httpx.AsyncClient:
    """Create the per-request upstream client.

    The timeout comes from ``REQUEST_TIMEOUT``; when unset, requests never time
    out.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT),
        follow_redirects=True,
        headers={"Accept": "application/json"},
    )


@asynccontextmanager
async def _client_scope(client: Optional[httpx.AsyncClient]):
    """Yield ``client`` as-is, or a fresh client closed on exit."""
    if client is not None:
        yield client
        return
    async with build_client() as owned:
        yield owned


async def fetch_json(
    client: httpx.AsyncClient, url: str, params: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Issue one GET and decode the JSON object body.

    Args:
        client: An open `httpx.AsyncClient`.
        url: Absolute URL to fetch.
        params: Optional query parameters.

    Returns:
        The decoded JSON object.

    Raises:
        FetchError: On transport errors, non-2xx statuses, invalid JSON, or a
            body that is not a JSON object.
    """
    log.debug("upstream.get url=%s params=%s", url, params)
    try:
        r = await client.get(url, params=params)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as exc:
        metrics.record_upstream("error")
        log.warning("upstream.error url=%s err=%r", url, exc)
        raise FetchError(url, exc) from exc

    if not isinstance(data, dict):
        metrics.record_upstream("error")
        exc = TypeError(f"expected a JSON object, got {type(data).__name__}")
        log.warning("upstream.error url=%s err=%r", url, exc)
        raise FetchError(url, exc)

    metrics.record_upstream("ok")
    return data


async def iter_pages(
    client: httpx.AsyncClient, seed_url: str
) -> AsyncIterator[Dict[str, Any]]:
    """Yield each page of a paginated listing, following ``next`` until null.

    There is no page limit and no guard against a cyclic ``next``.
    """
    url: Optional[str] = seed_url
    while url:
        page = await fetch_json(client, url)
        yield page
        url = page.get("next")


async def collect_all(
    client: httpx.AsyncClient, seed_url: str
) -> List[Dict[str, Any]]:
    """Flatten every page's ``results`` into one list, preserving page order."""
    results: List[Dict[str, Any]] = []
    pages = 0
    async for page in iter_pages(client, seed_url):
        results.extend(page.get("results") or [])
        pages += 1
    log.info("upstream.collected url=%s pages=%d results=%d", seed_url, pages, len(results))
    return results


# ---------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------


async def fetch_all_characters(
    client: Optional[httpx.AsyncClient] = None,
) -> List[Dict[str, Any]]:
    """Fetch every character (``/people/``) across all pages, upstream order."""
    async with _client_scope(client) as c:
        return await collect_all(c, people_url())


async def fetch_all_planets(
    client: Optional[httpx.AsyncClient] = None,
) -> List[Dict[str, Any]]:
    """Fetch every planet (``/planets/``) across all pages, upstream order."""
    async with _client_scope(client) as c:
        return await collect_all(c, planets_url())


async def fetch_all_residents(
    client: Optional[httpx.AsyncClient] = None,
) -> List[Dict[str, Any]]:
    """Fetch every planet's residents, each stamped with its planet's name.

    Planets are ordered by name (locale-aware); residents of one planet keep
    the order of that planet's ``residents`` list. The ``homeworld`` field is
    always overwritten with the planet name.

    Returns:
        A flat list of resident dicts grouped by planet.

    Raises:
        FetchError: If any planet page or resident fetch fails.
    """
    async with _client_scope(client) as c:
        planets = await collect_all(c, planets_url())
        planets.sort(key=lambda p: locale_key(p.get("name")))

        residents: List[Dict[str, Any]] = []
        for planet in planets:
            for endpoint in planet.get("residents") or []:
                resident = await fetch_json(c, endpoint)
                resident["homeworld"] = planet.get("name")
                residents.append(resident)

    log.info("upstream.residents planets=%d residents=%d", len(planets), len(residents))
    return residents


async def search_characters(
    term: str, client: Optional[httpx.AsyncClient] = None
) -> List[Dict[str, Any]]:
    """Forward a name search upstream and return its ``results`` as-is.

    Only the first page of upstream matches is returned.
    """
    async with _client_scope(client) as c:
        data = await fetch_json(c, people_url(), params={"search": term})
    return data.get("results") or []


async def quick_upstream_probe() -> bool:
    """Perform a lightweight upstream health probe.

    Returns:
        True if the upstream API root returns HTTP 200, otherwise False
        (including exceptions).
    """
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            r = await client.get(_url(""))
            return r.status_code == 200
    except httpx.HTTPError as exc:
        log.debug("upstream.probe_failed err=%r", exc)
        return False
