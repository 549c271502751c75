from __future__ import annotations

from io import BytesIO
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from careercoach.core.errors import ValidationError

from .models import ExtractedResume

SUPPORTED_EXTENSIONS = ("pdf", "docx")

PDF_MAGIC = b"%PDF-"
ZIP_MAGIC = b"PK\x03\x04"


def extension_of(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].strip().lower()


def _extract_pdf(content: bytes) -> tuple[str, int, list[str]]:
    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(content))
        text_parts: list[str] = []
        for page in reader.pages:
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
        if not text_parts:
            warnings.append("No extractable text found in PDF.")
        return "\n".join(text_parts), len(reader.pages), warnings
    except (PyPdfError, ValueError, KeyError) as exc:
        raise ValidationError(f"PDF parsing failed: {exc}") from exc


def _extract_docx(content: bytes) -> tuple[str, list[str]]:
    warnings: list[str] = []
    try:
        document = Document(BytesIO(content))
    except (BadZipFile, PackageNotFoundError, KeyError, ValueError) as exc:
        raise ValidationError(f"DOCX parsing failed: {exc}") from exc
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    if not paragraphs:
        warnings.append("No extractable text found in DOCX.")
    return "\n".join(paragraphs), warnings


def extract_resume_text(filename: str, content: bytes) -> ExtractedResume:
    """Extract plain text from an uploaded PDF or DOCX resume.

    Raises ``ValidationError`` for unsupported extensions, content that does
    not match its extension, and files the parser cannot read. An empty text
    result is not an error here; the caller decides.
    """
    extension = extension_of(filename)
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValidationError("Only PDF and DOCX files are allowed")
    if not content:
        raise ValidationError("Uploaded file is empty")

    if extension == "pdf":
        if not content.startswith(PDF_MAGIC):
            raise ValidationError("File signature does not match .pdf content.")
        text, page_count, warnings = _extract_pdf(content)
        return ExtractedResume(
            filename=filename,
            source_type="pdf",
            text=text,
            page_count=page_count,
            parsing_warnings=warnings,
        )

    if not content.startswith(ZIP_MAGIC):
        raise ValidationError("File signature does not match .docx content.")
    text, warnings = _extract_docx(content)
    return ExtractedResume(filename=filename, source_type="docx", text=text, parsing_warnings=warnings)
