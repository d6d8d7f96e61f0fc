"""
Upload intake: the temporary copy of one uploaded file.

The transport (multipart decoding) writes the upload to temporary storage and
hands over an ``UploadedFile``. ``upload_scope`` removes that copy on every
exit path of the request, success or failure.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from crudo_kernel.exceptions import MissingUploadError
from crudo_kernel.logging_config import get_logger

logger = get_logger("ingestion.services.uploads")


@dataclass(frozen=True)
class UploadedFile:
    """Client filename (the format discriminator) and the temp copy on disk."""

    filename: str
    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def stage_upload(filename: str, data: bytes, directory: Path | None = None) -> UploadedFile:
    """Write uploaded bytes to a temporary file owned by the request."""
    fd, path = tempfile.mkstemp(prefix="upload_", dir=directory)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
    return UploadedFile(filename=filename, path=Path(path))


@contextmanager
def upload_scope(upload: UploadedFile | None) -> Iterator[UploadedFile]:
    """Yield the upload and delete its temp copy afterwards.

    Raises:
        MissingUploadError: the request carried no file.
    """
    if upload is None:
        raise MissingUploadError()
    try:
        yield upload
    finally:
        upload.path.unlink(missing_ok=True)
        logger.debug("upload_removed", extra={"path": str(upload.path)})
