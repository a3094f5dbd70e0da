import base64
import binascii
import io
import logging
import re
import zipfile
from dataclasses import dataclass

import docx
import pypdf
from docx.opc.exceptions import PackageNotFoundError
from pypdf.errors import PdfReadError

from careerflow.app.core.exceptions import InputValidationError

log = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME_TYPES = ("text/plain", "text/markdown")
SUPPORTED_MIME_TYPES = (PDF_MIME_TYPE, DOCX_MIME_TYPE, *TEXT_MIME_TYPES)

DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<payload>.*)$",
    re.DOTALL,
)


@dataclass
class ResumeDocument:
    """A decoded resume upload.

    Attributes:
        mime_type (str): MIME type named by the data URI.
        content (bytes): The decoded payload.

    """

    mime_type: str
    content: bytes


def build_data_uri(mime_type: str, content: bytes) -> str:
    """Encode raw bytes as a `data:<mime>;base64,<payload>` URI."""
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def parse_data_uri(data_uri: str, max_bytes: int) -> ResumeDocument:
    """Decode and check a resume data URI.

    Args:
        data_uri (str): The `data:<mime>;base64,<payload>` URI.
        max_bytes (int): Maximum decoded payload size.

    Returns:
        ResumeDocument: The MIME type and decoded bytes.

    Raises:
        InputValidationError: If the URI is malformed, the MIME type is not
            supported, the payload is not valid Base64, is empty, or is larger
            than `max_bytes`.

    Notes:
        1. Match the URI against `data:<mime>[;param=value]*;base64,<payload>`.
        2. Check the MIME type against the supported types.
        3. Reject payloads whose encoded length already implies more than
           `max_bytes`, before decoding.
        4. Strictly decode the Base64 payload and check the decoded size.

    """
    match = DATA_URI_PATTERN.match((data_uri or "").strip())
    if not match:
        raise InputValidationError(
            "Resume must be a data URI of the form 'data:<mimetype>;base64,<encoded_data>'.",
            field="resume_data_uri",
        )

    mime_type = match.group("mime").lower()
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise InputValidationError(
            f"Unsupported resume type '{mime_type}'. Upload a PDF, DOCX, text or Markdown file.",
            field="resume_data_uri",
        )

    payload = re.sub(r"\s+", "", match.group("payload"))
    if len(payload) * 3 // 4 > max_bytes + 2:
        raise InputValidationError(
            f"Resume is larger than the {max_bytes // (1024 * 1024)} MB limit.",
            field="resume_data_uri",
        )

    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputValidationError(
            "Resume payload is not valid Base64.",
            field="resume_data_uri",
        ) from e

    if not content:
        raise InputValidationError("Resume file is empty.", field="resume_data_uri")
    if len(content) > max_bytes:
        raise InputValidationError(
            f"Resume is larger than the {max_bytes // (1024 * 1024)} MB limit.",
            field="resume_data_uri",
        )

    _msg = f"Decoded resume data URI: {mime_type}, {len(content)} bytes"
    log.debug(_msg)
    return ResumeDocument(mime_type=mime_type, content=content)


def extract_text(document: ResumeDocument) -> str:
    """Extract plain text from a decoded resume.

    Args:
        document (ResumeDocument): The decoded resume.

    Returns:
        str: The document text, stripped of leading/trailing whitespace.

    Raises:
        InputValidationError: If the document cannot be read, or contains no text.

    Notes:
        1. PDF: concatenate the text of every page with pypdf.
        2. DOCX: join paragraph text with python-docx.
        3. Text and Markdown: decode as UTF-8, replacing invalid bytes.

    """
    _msg = f"Extracting text from {document.mime_type} resume"
    log.debug(_msg)

    try:
        if document.mime_type == PDF_MIME_TYPE:
            reader = pypdf.PdfReader(io.BytesIO(document.content))
            text = "\n".join(page.extract_text() or "" for page in reader.pages)
        elif document.mime_type == DOCX_MIME_TYPE:
            word_document = docx.Document(io.BytesIO(document.content))
            text = "\n".join(paragraph.text for paragraph in word_document.paragraphs)
        else:
            text = document.content.decode("utf-8", errors="replace")
    except (
        PdfReadError,
        PackageNotFoundError,
        zipfile.BadZipFile,
        ValueError,
        KeyError,
        OSError,
    ) as e:
        _msg = f"Could not read {document.mime_type} resume: {e!s}"
        log.warning(_msg)
        raise InputValidationError(
            "The resume file could not be read. Please upload a valid document.",
            field="resume_data_uri",
        ) from e

    text = text.strip()
    if not text:
        raise InputValidationError(
            "No text could be extracted from the resume.",
            field="resume_data_uri",
        )
    return text
