"""Pure list transformations applied after aggregation: sorting and paging."""

import math
import unicodedata
from typing import Any, Dict, List, Tuple

from .errors import ValidationError

# ?ordenar= value -> character field
SORT_FIELDS: Dict[str, str] = {
    "nombre": "name",
    "peso": "mass",
    "altura": "height",
}

UNKNOWN = "unknown"


def resolve_sort_field(ordenar: str) -> str:
    """Map a public ``ordenar`` value to a character field name.

    Raises:
        ValidationError: If ``ordenar`` is not one of nombre/peso/altura.
    """
    try:
        return SORT_FIELDS[ordenar]
    except KeyError:
        raise ValidationError("Parámetro de ordenar no válido") from None


def locale_key(value: Any) -> Tuple[str, str, str]:
    """Sort key approximating a locale-aware (ICU-style) string comparison.

    Primary: base letters, case-insensitive ("Éowyn" next to "Eowyn").
    Secondary: accents. Tertiary: case, lowercase first.
    """
    text = "" if value is None else str(value)
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), text.swapcase()


def numeric_key(value: Any) -> float:
    """Parse a SWAPI numeric string; ``"unknown"`` and junk sort last.

    Thousands separators are dropped ("1,358" -> 1358.0). Missing values and
    anything that still fails to parse are treated like ``"unknown"``.
    """
    if value is None or value == UNKNOWN:
        return math.inf
    try:
        parsed = float(str(value).replace(",", ""))
    except ValueError:
        return math.inf
    return math.inf if math.isnan(parsed) else parsed


def sort_characters(records: List[Dict[str, Any]], field: str) -> List[Dict[str, Any]]:
    """Return ``records`` sorted ascending by ``field``.

    Args:
        records: Character dicts.
        field: One of ``name`` (locale-aware), ``mass`` or ``height`` (numeric).

    Returns:
        A new list; ties keep their input order.

    Raises:
        ValueError: For any other field.
    """
    if field == "name":
        return sorted(records, key=lambda r: locale_key(r.get("name")))
    if field in ("mass", "height"):
        return sorted(records, key=lambda r: numeric_key(r.get(field)))
    raise ValueError(f"unsupported sort field: {field!r}")


def paginate(records: List[Any], page: int = 1, limit: int = 10) -> Dict[str, Any]:
    """Slice one 1-based page out of an already ordered list.

    Args:
        records: The full (sorted/filtered) list.
        page: 1-based page number.
        limit: Page size.

    Returns:
        ``{"page", "limit", "total", "results"}`` where ``total`` is the
        unpaginated length. Pages past the end have empty ``results``.

    Raises:
        ValidationError: If ``page`` or ``limit`` is below 1.
    """
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1:
        raise ValidationError("limit must be >= 1")

    start = (page - 1) * limit
    end = page * limit
    return {
        "page": page,
        "limit": limit,
        "total": len(records),
        "results": records[start:end],
    }
