from __future__ import annotations

import base64
import binascii
import contextlib
import io
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from reportlab.pdfgen import canvas

from ..errors import OutputEncodingError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DATA_URI_PREFIX = f"data:{PDF_MIME};filename=generated.pdf;base64,"
PDF_MAGIC = b"%PDF-"


@dataclass(frozen=True)
class PdfBlob:
    data: bytes
    mime_type: str = PDF_MIME

    @property
    def size(self) -> int:
        return len(self.data)

    def stream(self) -> io.BytesIO:
        return io.BytesIO(self.data)


@dataclass(frozen=True)
class RenderedPdf:
    """The bytes of one render pass, exposed in every output form."""

    data: bytes
    page_count: int
    filename: str

    def to_bytes(self) -> bytes:
        return self.data

    def to_data_uri(self) -> str:
        return DATA_URI_PREFIX + base64.b64encode(self.data).decode("ascii")

    def to_blob(self) -> PdfBlob:
        return PdfBlob(self.data)


def finalize(canv: canvas.Canvas, buffer: io.BytesIO, page_count: int, filename: str) -> RenderedPdf:
    try:
        canv.save()
    except Exception as exc:
        raise OutputEncodingError(f"Failed to serialize {filename}: {exc}") from exc
    data = buffer.getvalue()
    if not data.startswith(PDF_MAGIC):
        raise OutputEncodingError(f"Serialized {filename} is not a PDF ({len(data)} bytes)")
    logger.debug("Serialized %s: %d pages, %d bytes", filename, page_count, len(data))
    return RenderedPdf(data=data, page_count=page_count, filename=filename)


def data_uri_to_bytes(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise OutputEncodingError("Not a base64 data URI")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise OutputEncodingError(f"Malformed base64 payload: {exc}") from exc


@contextlib.contextmanager
def object_url(blob: PdfBlob, suffix: str = ".pdf", directory: Optional[Path] = None) -> Iterator[str]:
    """Materialize ``blob`` as a temporary file and yield its ``file://`` URL.

    The file is removed when the block exits, whether or not it raised.
    """
    fd, name = tempfile.mkstemp(suffix=suffix, dir=str(directory) if directory else None)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(blob.data)
        yield path.as_uri()
    finally:
        path.unlink(missing_ok=True)
