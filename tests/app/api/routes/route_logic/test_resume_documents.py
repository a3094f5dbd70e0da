import base64
import io
import logging

import docx
import pypdf
import pytest

from careerflow.app.api.routes.route_logic.resume_documents import (
    DOCX_MIME_TYPE,
    PDF_MIME_TYPE,
    ResumeDocument,
    build_data_uri,
    extract_text,
    parse_data_uri,
)
from careerflow.app.core.exceptions import InputValidationError

log = logging.getLogger(__name__)

MAX_BYTES = 1024


def _docx_bytes(*paragraphs: str) -> bytes:
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _blank_pdf_bytes() -> bytes:
    writer = pypdf.PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_build_data_uri():
    assert build_data_uri("text/plain", b"hi") == "data:text/plain;base64,aGk="


def test_parse_data_uri_plain_text():
    document = parse_data_uri(build_data_uri("text/plain", b"Jane Doe"), max_bytes=MAX_BYTES)
    assert document == ResumeDocument(mime_type="text/plain", content=b"Jane Doe")


def test_parse_data_uri_accepts_parameters_and_uppercase_mime():
    payload = base64.b64encode(b"# Jane").decode()
    document = parse_data_uri(f"data:Text/Markdown;charset=utf-8;base64,{payload}", max_bytes=MAX_BYTES)
    assert document.mime_type == "text/markdown"
    assert document.content == b"# Jane"


@pytest.mark.parametrize(
    "data_uri",
    [
        "",
        "not a data uri",
        "data:text/plain,plain-not-base64",
        "data:;base64,aGk=",
    ],
)
def test_parse_data_uri_rejects_malformed(data_uri):
    with pytest.raises(InputValidationError) as exc_info:
        parse_data_uri(data_uri, max_bytes=MAX_BYTES)
    assert exc_info.value.field == "resume_data_uri"


def test_parse_data_uri_rejects_unsupported_type():
    with pytest.raises(InputValidationError, match="Unsupported resume type 'image/png'"):
        parse_data_uri(build_data_uri("image/png", b"\x89PNG"), max_bytes=MAX_BYTES)


def test_parse_data_uri_rejects_invalid_base64():
    with pytest.raises(InputValidationError, match="not valid Base64"):
        parse_data_uri("data:text/plain;base64,@@@@", max_bytes=MAX_BYTES)


def test_parse_data_uri_rejects_empty_payload():
    with pytest.raises(InputValidationError, match="empty"):
        parse_data_uri("data:text/plain;base64,", max_bytes=MAX_BYTES)


def test_parse_data_uri_rejects_oversized_payload():
    data_uri = build_data_uri("text/plain", b"x" * (MAX_BYTES + 1))
    with pytest.raises(InputValidationError, match="larger than"):
        parse_data_uri(data_uri, max_bytes=MAX_BYTES)


def test_parse_data_uri_accepts_payload_at_limit():
    document = parse_data_uri(build_data_uri("text/plain", b"x" * MAX_BYTES), max_bytes=MAX_BYTES)
    assert len(document.content) == MAX_BYTES


def test_extract_text_from_plain_text():
    document = ResumeDocument(mime_type="text/plain", content=b"  Jane Doe\nPython  ")
    assert extract_text(document) == "Jane Doe\nPython"


def test_extract_text_replaces_invalid_utf8():
    document = ResumeDocument(mime_type="text/markdown", content=b"Jane \xff Doe")
    assert extract_text(document) == "Jane � Doe"


def test_extract_text_from_docx():
    document = ResumeDocument(
        mime_type=DOCX_MIME_TYPE,
        content=_docx_bytes("Jane Doe", "Senior Engineer"),
    )
    assert extract_text(document) == "Jane Doe\nSenior Engineer"


def test_extract_text_rejects_corrupt_docx():
    document = ResumeDocument(mime_type=DOCX_MIME_TYPE, content=b"not a zip file")
    with pytest.raises(InputValidationError, match="could not be read"):
        extract_text(document)


def test_extract_text_rejects_corrupt_pdf():
    document = ResumeDocument(mime_type=PDF_MIME_TYPE, content=b"not a pdf")
    with pytest.raises(InputValidationError, match="could not be read"):
        extract_text(document)


def test_extract_text_rejects_pdf_without_text():
    document = ResumeDocument(mime_type=PDF_MIME_TYPE, content=_blank_pdf_bytes())
    with pytest.raises(InputValidationError, match="No text could be extracted"):
        extract_text(document)


def test_extract_text_rejects_blank_text():
    with pytest.raises(InputValidationError, match="No text could be extracted"):
        extract_text(ResumeDocument(mime_type="text/plain", content=b"   \n"))
