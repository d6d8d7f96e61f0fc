"""
Response DTOs handed to the transport.

``to_dict()`` renders the wire field names the frontend reads; ``status_code``
tells the transport which HTTP status to use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from crudo_kernel.exceptions import CrudoError

from crudo_ingestion.domain.types import NormalizedRow

EMPTY_AFTER_FILTER_MESSAGE = (
    "Luego de eliminar filas sin Sociedad, el archivo quedó vacío. Revisá el archivo de origen."
)
NO_ROWS_TO_LOAD_MESSAGE = "No hay filas válidas para cargar (quedó vacío luego de filtros/exclusiones)."
UNEXPECTED_ERROR_CODE = "UNEXPECTED_ERROR"


@dataclass(frozen=True)
class PreviewResponse:
    """Preview of the filtered export, or an error."""

    empty_after_filter: bool = False
    removed_sociedad: int = 0
    total_filas: int = 0
    preview: tuple[NormalizedRow, ...] = ()
    clientes_unicos: tuple[str, ...] = ()
    suma_o: float = 0.0
    suma_o_column_present: bool = False
    status_code: int = 200
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def empty(cls, removed_sociedad: int) -> "PreviewResponse":
        """Every row was dropped by the Sociedad filter (not an error)."""
        return cls(empty_after_filter=True, removed_sociedad=removed_sociedad)

    @classmethod
    def failure(cls, exc: CrudoError) -> "PreviewResponse":
        return cls(status_code=exc.status_code, error=str(exc), error_code=exc.code)

    @classmethod
    def unexpected(cls, exc: Exception) -> "PreviewResponse":
        """Server error for a failure no typed handler claimed."""
        return cls(status_code=500, error=str(exc) or type(exc).__name__, error_code=UNEXPECTED_ERROR_CODE)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {
            "emptyAfterFilter": self.empty_after_filter,
            "removedSociedad": self.removed_sociedad,
            "totalFilas": self.total_filas,
            "preview": [dict(row) for row in self.preview],
            "clientesUnicos": list(self.clientes_unicos),
            "sumaO": self.suma_o,
        }


@dataclass(frozen=True)
class LoadResponse:
    """Outcome of a load request, or an error."""

    ok: bool = False
    removed_sociedad: int = 0
    total_final: int = 0
    filas_inconsistentes: int = 0
    status_code: int = 200
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, exc: CrudoError) -> "LoadResponse":
        return cls(status_code=exc.status_code, error=str(exc), error_code=exc.code)

    @classmethod
    def unexpected(cls, exc: Exception) -> "LoadResponse":
        return cls(status_code=500, error=str(exc) or type(exc).__name__, error_code=UNEXPECTED_ERROR_CODE)

    @classmethod
    def refused(cls, message: str, error_code: str) -> "LoadResponse":
        """Client-side refusal for recoverable filter conditions."""
        return cls(status_code=400, error=message, error_code=error_code)

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {
            "ok": self.ok,
            "removedSociedad": self.removed_sociedad,
            "totalFinal": self.total_final,
            "filasInconsistentes": self.filas_inconsistentes,
        }
