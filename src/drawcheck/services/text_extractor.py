"""Document text extraction for drawings and building-code PDFs.

Drawings and code documents arrive as PDFs; the matching engine only needs
their text. Pages are joined with a form feed so page boundaries survive.
"""
from io import BytesIO
from pathlib import Path
from typing import Optional

import anyio
import httpx
import pdfplumber

from drawcheck.config import settings
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)

PAGE_BREAK = "\f"


class TextExtractionError(ValueError):
    """Raised when a document cannot be read as a PDF."""


class DocumentFetchError(RuntimeError):
    """Raised when a remote document cannot be downloaded."""


def is_pdf(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    """Check whether an upload looks like a PDF.

    Args:
        filename: Name of the uploaded file
        content_type: MIME type reported by the client, if any

    Returns:
        True for ``.pdf`` files or ``application/pdf`` uploads
    """
    if content_type and content_type.lower().startswith("application/pdf"):
        return True
    return bool(filename) and Path(filename).suffix.lower() == ".pdf"


def extract_pdf_text(pdf_bytes: bytes, filename: Optional[str] = None) -> str:
    """Extract the text of every page of a PDF.

    Args:
        pdf_bytes: Raw PDF content
        filename: Original filename (for logging)

    Returns:
        Page texts joined with form feeds

    Raises:
        TextExtractionError: If the content is empty or not a readable PDF
    """
    if not pdf_bytes:
        raise TextExtractionError("Empty document")

    logger.info("Extracting PDF text", filename=filename, size_bytes=len(pdf_bytes))
    pages = []
    try:
        with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
            for page in pdf.pages:
                text = page.extract_text() or ""
                pages.append(text.strip())
    except Exception as e:
        # pdfminer raises many unrelated exception types for broken files
        logger.error("PDF text extraction failed", filename=filename, error=str(e))
        raise TextExtractionError(f"Could not read PDF {filename or ''}: {e}".strip()) from e

    text = PAGE_BREAK.join(pages)
    logger.info("PDF text extracted", filename=filename, pages=len(pages), characters=len(text))
    return text


async def extract_pdf_text_async(pdf_bytes: bytes, filename: Optional[str] = None) -> str:
    """Run :func:`extract_pdf_text` in a worker thread."""
    return await anyio.to_thread.run_sync(extract_pdf_text, pdf_bytes, filename)


async def fetch_document(url: str, timeout: Optional[float] = None) -> bytes:
    """Download a document over HTTP(S).

    Args:
        url: Document URL
        timeout: Request timeout in seconds (default: from settings)

    Returns:
        Response body

    Raises:
        DocumentFetchError: If the request fails or returns an error status
    """
    logger.info("Fetching document", url=url)
    try:
        async with httpx.AsyncClient(timeout=timeout or settings.pdf_fetch_timeout_seconds, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content
    except httpx.HTTPError as e:
        logger.error("Document fetch failed", url=url, error=str(e))
        raise DocumentFetchError(f"Could not fetch {url}: {e}") from e
