"""
crudo_ingestion.domain -- Pure types, column naming, filters and aggregates.

ZERO I/O.
"""

from crudo_ingestion.domain.aggregates import aggregate_column, parse_amount, sum_column
from crudo_ingestion.domain.columns import column_index, column_name, column_names, normalize_rows
from crudo_ingestion.domain.filters import (
    apply_exclusions,
    collation_key,
    filter_sociedad,
    parse_exclusion_keys,
    unique_client_keys,
)
from crudo_ingestion.domain.types import (
    AMOUNT_COLUMN,
    CLIENT_KEY_COLUMN,
    SOCIEDAD_COLUMN,
    AggregateResult,
    ExclusionResult,
    NormalizedRow,
    NormalizedTable,
    SociedadFilterResult,
)

__all__ = [
    "AMOUNT_COLUMN",
    "CLIENT_KEY_COLUMN",
    "SOCIEDAD_COLUMN",
    "AggregateResult",
    "ExclusionResult",
    "NormalizedRow",
    "NormalizedTable",
    "SociedadFilterResult",
    "aggregate_column",
    "apply_exclusions",
    "collation_key",
    "column_index",
    "column_name",
    "column_names",
    "filter_sociedad",
    "normalize_rows",
    "parse_amount",
    "parse_exclusion_keys",
    "sum_column",
    "unique_client_keys",
]
