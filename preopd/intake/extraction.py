# preopd/intake/extraction.py
"""
Text extraction for uploaded previous records (PDF, DOCX, plain text).
"""
from __future__ import annotations

import io
from dataclasses import dataclass

import docx
from pypdf import PdfReader

from preopd.errors import (
    ExtractionError,
    OCRNotImplementedError,
    UnsupportedFileTypeError,
)


PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

PDF_TAG = "[PDF Embedded Text Extracted]\n"
DOCX_TAG = "[DOCX Text Content Extracted]\n"
TEXT_TAG = "[Plain Text Content]\n"
PAGE_BREAK = "\n--- Page Break ---\n"


@dataclass(frozen=True)
class UploadedFile:
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def _extract_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    text = ""
    for page in reader.pages:
        text += (page.extract_text() or "") + PAGE_BREAK
    return text


def _extract_docx(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs)


def _parse(file: UploadedFile, parser) -> str:
    try:
        return parser(file.data)
    except Exception as exc:
        # pypdf and python-docx raise a wide mix of exception types
        raise ExtractionError(file.name, str(exc) or type(exc).__name__) from exc


def extract_text_from_file(file: UploadedFile) -> str:
    """
    Return the file's text prefixed with a tag naming how it was read.

    Raises OCRNotImplementedError for images, UnsupportedFileTypeError for
    anything that is not PDF, DOCX or plain text, and ExtractionError when a
    PDF or DOCX cannot be parsed.
    """
    content_type = (file.content_type or "").split(";")[0].strip().lower()

    if content_type == PDF_MIME:
        return PDF_TAG + _parse(file, _extract_pdf)
    if content_type == DOCX_MIME:
        return DOCX_TAG + _parse(file, _extract_docx)
    if content_type == TEXT_MIME:
        return TEXT_TAG + file.data.decode("utf-8", errors="replace")
    if content_type.startswith("image/"):
        raise OCRNotImplementedError(file.name, content_type)
    raise UnsupportedFileTypeError(file.content_type)
