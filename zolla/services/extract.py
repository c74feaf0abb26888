from __future__ import annotations

import logging
from io import BytesIO
from typing import Any
from zipfile import BadZipFile, ZipFile

from docx import Document
from pypdf import PdfReader

from zolla.core.config import settings
from zolla.schemas.analysis import ExtractTextResponse

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"txt", "docx", "pdf"}

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _is_zip_payload(content: bytes) -> bool:
    return any(content.startswith(prefix) for prefix in ZIP_MAGICS)


def _zip_has_paths(content: bytes, prefixes: tuple[str, ...]) -> bool:
    try:
        with ZipFile(BytesIO(content)) as archive:
            names = archive.namelist()
    except BadZipFile:
        return False
    return any(any(name.startswith(prefix) for prefix in prefixes) for name in names)


def _is_probably_text_payload(content: bytes) -> bool:
    if not content:
        return False
    sample = content[:4096]
    if b"\x00" in sample:
        return False
    printable = 0
    for byte in sample:
        if byte in (9, 10, 13) or byte >= 32:
            printable += 1
    return (printable / len(sample)) >= 0.75


def validate_upload(*, filename: str, content: bytes) -> str:
    ext = file_extension(filename)
    if ext == "doc":
        raise ValueError("Legacy .doc is not supported. Convert to .docx.")
    if ext not in ALLOWED_EXTENSIONS:
        raise ValueError(
            f"Unsupported file type '.{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}."
        )
    if len(content) > settings.max_upload_bytes:
        raise ValueError(
            f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB."
        )
    if not content:
        raise ValueError("The uploaded file is empty.")

    if ext == "pdf" and not content.startswith(PDF_MAGIC):
        raise ValueError("File signature does not match .pdf content.")
    if ext == "docx" and (not _is_zip_payload(content) or not _zip_has_paths(content, ("word/",))):
        raise ValueError("File signature does not match .docx content.")
    if ext == "txt" and not _is_probably_text_payload(content):
        raise ValueError("File signature does not match .txt text content.")
    return ext


def _decode_text(content: bytes, details: dict[str, Any]) -> str:
    for encoding in ("utf-8", "utf-16", "latin-1"):
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        details["encoding"] = encoding
        return text
    return ""


def extract_text(filename: str, content: bytes) -> ExtractTextResponse:
    ext = validate_upload(filename=filename, content=content)
    details: dict[str, Any] = {"extension": ext}

    if ext == "txt":
        source_type = "text"
        text = _decode_text(content, details)
    elif ext == "pdf":
        source_type = "pdf"
        try:
            reader = PdfReader(BytesIO(content))
            page_chunks = [page.extract_text() or "" for page in reader.pages]
        except Exception as exc:  # noqa: BLE001 - pypdf raises a wide range of errors
            raise ValueError("Unable to extract text from this PDF file.") from exc
        text = "\n\n".join(chunk for chunk in page_chunks if chunk.strip())
        details["pages"] = len(page_chunks)
    else:
        source_type = "word"
        try:
            doc = Document(BytesIO(content))
        except Exception as exc:  # noqa: BLE001 - python-docx raises package and xml errors
            raise ValueError("Unable to extract text from this Word document.") from exc
        text = "\n".join(paragraph.text for paragraph in doc.paragraphs if paragraph.text.strip())
        details["paragraphs"] = len(doc.paragraphs)

    text = text.strip()
    if not text:
        raise ValueError("No readable text found in the uploaded file.")

    logger.info("extract_text ext=%s bytes=%s characters=%s", ext, len(content), len(text))
    return ExtractTextResponse(
        filename=filename,
        source_type=source_type,
        text=text,
        characters=len(text),
        details=details,
    )
