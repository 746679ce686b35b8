import io

import docx
import pytest
from pypdf import PdfWriter

from preopd.errors import (
    ExtractionError,
    OCRNotImplementedError,
    UnsupportedFileTypeError,
)
from preopd.intake.extraction import (
    DOCX_MIME,
    DOCX_TAG,
    PAGE_BREAK,
    PDF_TAG,
    UploadedFile,
    extract_text_from_file,
)


def test_plain_text_is_returned_with_tag():
    content = "Hb 12.5 g/dL\nHbA1c 6.2%"
    text = extract_text_from_file(
        UploadedFile("labs.txt", "text/plain", content.encode("utf-8"))
    )
    assert text == "[Plain Text Content]\n" + content


def test_plain_text_with_charset_parameter():
    text = extract_text_from_file(
        UploadedFile("note.txt", "text/plain; charset=utf-8", b"ok")
    )
    assert text == "[Plain Text Content]\nok"


def test_unsupported_type_raises():
    with pytest.raises(UnsupportedFileTypeError) as excinfo:
        extract_text_from_file(UploadedFile("records.zip", "application/zip", b"PK"))
    assert "application/zip" in str(excinfo.value)


def test_images_raise_instead_of_placeholder():
    with pytest.raises(OCRNotImplementedError):
        extract_text_from_file(UploadedFile("xray.png", "image/png", b"\x89PNG"))
    # still a NotImplementedError for callers that only know the builtin
    with pytest.raises(NotImplementedError):
        extract_text_from_file(UploadedFile("scan.jpg", "image/jpeg", b"\xff\xd8"))


def test_docx_text_is_extracted():
    document = docx.Document()
    document.add_paragraph("Discharge summary")
    document.add_paragraph("Metformin 500mg BD")
    buffer = io.BytesIO()
    document.save(buffer)

    text = extract_text_from_file(UploadedFile("discharge.docx", DOCX_MIME, buffer.getvalue()))

    assert text.startswith(DOCX_TAG)
    assert "Discharge summary" in text
    assert "Metformin 500mg BD" in text


def test_pdf_pages_end_with_page_break():
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)

    text = extract_text_from_file(UploadedFile("report.pdf", "application/pdf", buffer.getvalue()))

    assert text.startswith(PDF_TAG)
    assert text.count(PAGE_BREAK) == 2
    assert text.endswith(PAGE_BREAK)


def _text_pdf(pages):
    """A minimal PDF with one line of Helvetica text per page."""
    objects = [b"<< /Type /Catalog /Pages 2 0 R >>"]
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(len(pages)))
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode())
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    for i, line in enumerate(pages):
        content = f"BT /F1 12 Tf 20 100 Td ({line}) Tj ET".encode()
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 200] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_at
    return bytes(out)


def test_pdf_page_text_precedes_each_page_break():
    data = _text_pdf(["Haemoglobin 11.2 g/dL", "Chest X-ray clear"])

    text = extract_text_from_file(UploadedFile("labs.pdf", "application/pdf", data))

    assert text.startswith(PDF_TAG)
    first, second, tail = text[len(PDF_TAG):].split(PAGE_BREAK)
    assert "Haemoglobin 11.2 g/dL" in first
    assert "Chest X-ray clear" in second
    assert tail == ""


def test_corrupt_docx_raises_extraction_error():
    with pytest.raises(ExtractionError) as excinfo:
        extract_text_from_file(UploadedFile("broken.docx", DOCX_MIME, b"not a zip"))
    assert "broken.docx" in str(excinfo.value)
