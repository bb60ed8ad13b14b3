"""Rule extraction endpoints - build rule sets from building-code PDFs."""
from fastapi import APIRouter, HTTPException, UploadFile, File, Form

from drawcheck.config import settings
from drawcheck.models import ExtractFromUrlRequest, ExtractionResponse
from drawcheck.services.rule_extractor import RuleExtractionError, get_rule_extractor
from drawcheck.services.text_extractor import (
    DocumentFetchError,
    TextExtractionError,
    extract_pdf_text_async,
    fetch_document,
)
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


async def _extract_rules(pdf_bytes: bytes, source: str, authority: str) -> ExtractionResponse:
    try:
        text = await extract_pdf_text_async(pdf_bytes, source)
    except TextExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await get_rule_extractor().process_text(text, authority)
    except RuleExtractionError as e:
        logger.error("Rule extraction failed", source=source, authority=authority, error=str(e))
        raise HTTPException(status_code=502, detail=f"Rule extraction failed: {e}")


@router.post("/extract-from-file", response_model=ExtractionResponse)
async def extract_from_file(
    file: UploadFile = File(..., description="Building-code PDF"),
    authority: str = Form("UNKNOWN", description="Issuing authority"),
):
    """Extract a rule set from an uploaded building-code PDF.

    Returns:
        ExtractionResponse with the persisted rules
    """
    logger.info("Received extraction request", filename=file.filename, authority=authority)

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_mb}MB",
        )

    return await _extract_rules(content, file.filename or "upload.pdf", authority)


@router.post("/extract-from-url", response_model=ExtractionResponse)
async def extract_from_url(request: ExtractFromUrlRequest):
    """Download a building-code PDF and extract its rule set.

    Returns:
        ExtractionResponse with the persisted rules
    """
    logger.info("Received extraction request", url=request.pdf_url, authority=request.authority)

    try:
        content = await fetch_document(request.pdf_url)
    except DocumentFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return await _extract_rules(content, request.pdf_url, request.authority)
