"""
Row filters and client-key extraction. ZERO I/O.

Filter order is fixed: Sociedad filter first, then (preview) key extraction
and aggregation, or (load) operator exclusions. Every consumer trims the cells
it reads; normalized rows themselves are never trimmed or mutated.
"""

from __future__ import annotations

import json
import unicodedata
from typing import Any, Iterable, Sequence

from crudo_kernel.exceptions import InvalidExclusionListError

from crudo_ingestion.domain.types import (
    CLIENT_KEY_COLUMN,
    SOCIEDAD_COLUMN,
    ExclusionResult,
    NormalizedRow,
    SociedadFilterResult,
)


def to_text_trimmed(value: Any) -> str:
    """Cell (or request value) as trimmed text; None -> ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


# -----------------------------------------------------------------------------
# Sociedad filter
# -----------------------------------------------------------------------------


def filter_sociedad(rows: Sequence[NormalizedRow]) -> SociedadFilterResult:
    """Keep rows whose Sociedad (column a) is non-blank after trimming."""
    retained = tuple(r for r in rows if to_text_trimmed(r.get(SOCIEDAD_COLUMN)) != "")
    return SociedadFilterResult(
        total_original=len(rows),
        total=len(retained),
        removed=len(rows) - len(retained),
        rows=retained,
    )


# -----------------------------------------------------------------------------
# Unique client keys
# -----------------------------------------------------------------------------


def collation_key(value: str) -> tuple[str, str, str, str]:
    """Deterministic locale-style sort key.

    Levels: base letters ignoring accents and case, then accents, then case
    (lowercase first), then raw code points.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), value.swapcase(), value)


def unique_client_keys(rows: Iterable[NormalizedRow]) -> tuple[str, ...]:
    """Distinct trimmed non-blank client keys (column b), collation-sorted.

    Deduplication is exact and case-sensitive: "ACME" and "acme" are two keys.
    """
    seen: set[str] = set()
    for row in rows:
        key = to_text_trimmed(row.get(CLIENT_KEY_COLUMN))
        if key:
            seen.add(key)
    return tuple(sorted(seen, key=collation_key))


# -----------------------------------------------------------------------------
# Operator exclusions
# -----------------------------------------------------------------------------


def parse_exclusion_keys(raw: str | Sequence[Any] | None) -> frozenset[str]:
    """Exclusion set from the wire form of ``clientesExcluir``.

    Accepts a JSON-serialized list, an already-decoded sequence, or None /
    empty string (no exclusions). Elements are trimmed.

    Raises:
        InvalidExclusionListError: invalid JSON, or JSON that is not a list.
    """
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        if not raw.strip():
            return frozenset()
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidExclusionListError(str(exc)) from exc
    else:
        decoded = raw
    if decoded is None:
        return frozenset()
    if isinstance(decoded, (str, bytes, dict)) or not isinstance(decoded, (list, tuple, set, frozenset)):
        raise InvalidExclusionListError(f"expected a list, got {type(decoded).__name__}")
    return frozenset(to_text_trimmed(item) for item in decoded)


def apply_exclusions(rows: Sequence[NormalizedRow], exclusions: frozenset[str]) -> ExclusionResult:
    """Drop rows whose trimmed client key is in ``exclusions``.

    Rows with an empty client key are never excluded.
    """
    kept: list[NormalizedRow] = []
    for row in rows:
        key = to_text_trimmed(row.get(CLIENT_KEY_COLUMN))
        if key and key in exclusions:
            continue
        kept.append(row)
    return ExclusionResult(rows=tuple(kept), excluded=len(rows) - len(kept))
