"""
crudo_ingestion -- Headerless export ingestion and bulk load.

Decodes a .csv/.xlsx export into positional rows, names columns a, b, c, ...,
filters rows without Sociedad, previews client keys and the column-o total,
applies operator exclusions, and bulk-loads the result into the destination
table followed by invalid-date reconciliation.

Architecture:
    adapters/  file bytes -> raw rows (no DB)
    domain/    pure column naming, filters, aggregates (ZERO I/O)
    encoding/  raw rows -> bulk-load text
    store/     destination truncate / bulk load / reconcile
    services/  request-scoped preview and load entry points
"""
