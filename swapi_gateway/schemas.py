"""Pydantic schemas for API response bodies.

Upstream records are passed through verbatim, so they are typed as plain
mappings rather than modelled field by field.
"""

from typing import Any, Dict, List, Literal
from pydantic import BaseModel

Record = Dict[str, Any]


class CharactersPage(BaseModel):
    page: int
    limit: int
    total: int
    results: List[Record]


class HealthcheckOut(BaseModel):
    status: Literal["ok", "degraded"]
    upstream_ok: bool


class ErrorOut(BaseModel):
    error: str
