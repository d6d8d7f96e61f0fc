"""
Typed exception hierarchy for the crudo loader.

Every error has a typed class (catch by type, not message), a ``code`` class
attribute (machine-readable, API-safe) and structured attributes instead of
parsed message strings.

    CrudoError (base)
    |
    +-- IngestError                  client error (HTTP 400)
    |   +-- MissingUploadError
    |   +-- UnsupportedFormatError
    |   +-- SourceDecodeError
    |   +-- InvalidExclusionListError
    |
    +-- StoreError                   server error (HTTP 500)

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Ingest          | NO_FILE_UPLOADED            | Request arrived without a file
                | UNSUPPORTED_FORMAT          | Extension is neither .csv nor .xlsx
                | SOURCE_DECODE_FAILED        | .xlsx workbook cannot be read
                | INVALID_EXCLUSION_LIST      | clientesExcluir is not a JSON list
----------------|-----------------------------|-----------------------------------------
Store           | STORE_ERROR                 | Any failure during truncate, bulk load,
                |                             | reconcile, purge or final count

Empty-after-filter and no-rows-to-load are NOT exceptions: the filters report
them as structured results and the services turn them into responses.
"""


class CrudoError(Exception):
    """
    Base exception for all crudo loader errors.

    All subclasses must have a `code` class attribute and a `status_code`
    used by the transport when rendering the failure.
    """

    code: str = "CRUDO_ERROR"
    status_code: int = 500


# Ingest (client-side) exceptions


class IngestError(CrudoError):
    """Base exception for problems with the uploaded file or request fields."""

    code: str = "INGEST_ERROR"
    status_code: int = 400


class MissingUploadError(IngestError):
    """The request did not carry a file."""

    code: str = "NO_FILE_UPLOADED"

    def __init__(self):
        super().__init__("No file uploaded")


class UnsupportedFormatError(IngestError):
    """The filename extension matches neither .csv nor .xlsx."""

    code: str = "UNSUPPORTED_FORMAT"

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__("Formato no soportado")


class SourceDecodeError(IngestError):
    """A .xlsx upload whose workbook cannot be opened or read.

    CSV bytes never raise this: invalid UTF-8 is replaced with U+FFFD.
    """

    code: str = "SOURCE_DECODE_FAILED"

    def __init__(self, filename: str, source_format: str, reason: str):
        self.filename = filename
        self.source_format = source_format
        self.reason = reason
        super().__init__(f"Could not read {source_format} file {filename!r}: {reason}")


class InvalidExclusionListError(IngestError):
    """The serialized exclusion list is not a JSON array."""

    code: str = "INVALID_EXCLUSION_LIST"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"clientesExcluir must be a JSON list: {reason}")


# Store (server-side) exceptions


class StoreError(CrudoError):
    """
    A destination store statement failed.

    The load sequence is not atomic: depending on ``step`` the destination may
    be left truncated-but-not-reloaded or loaded-but-not-reconciled.
    """

    code: str = "STORE_ERROR"
    status_code: int = 500

    def __init__(self, step: str, table: str, reason: str):
        self.step = step
        self.table = table
        self.reason = reason
        super().__init__(reason)
