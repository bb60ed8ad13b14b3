"""Drawing check endpoints - run a rule set against a drawing."""
from typing import Any, List, Optional, Sequence

from fastapi import APIRouter, HTTPException, UploadFile, File, Form

from drawcheck.config import settings
from drawcheck.core.checker import get_rule_checker, summarize
from drawcheck.models import CheckReportResponse, CheckTextRequest
from drawcheck.services.rule_store import RuleSetNotFoundError, authority_slug, get_rule_store
from drawcheck.services.text_extractor import TextExtractionError, extract_pdf_text_async, is_pdf
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


def _load_rules(authority: Optional[str]) -> List[Any]:
    """Load a stored rule set, translating store errors to HTTP errors."""
    try:
        return get_rule_store().load(authority)
    except RuleSetNotFoundError as e:
        raise HTTPException(status_code=404, detail=f"Rules not found for authority {e.authority}")
    except ValueError as e:
        logger.error("Stored rule set is unusable", authority=authority_slug(authority), error=str(e))
        raise HTTPException(status_code=500, detail=str(e))


def _build_report(authority: Optional[str], rules: Sequence[Any], text: str) -> CheckReportResponse:
    results = get_rule_checker().check(rules, text)
    return CheckReportResponse(
        authority=authority,
        summary=summarize(results),
        results=[result.to_json_dict() for result in results],
    )


@router.post("/check-drawing", response_model=CheckReportResponse)
async def check_drawing(
    file: UploadFile = File(..., description="Drawing PDF"),
    authority: str = Form("UNKNOWN", description="Authority whose rule set is applied"),
):
    """Check an uploaded drawing PDF against an authority's rule set.

    Args:
        file: Drawing PDF
        authority: Authority name (e.g. "DLF")

    Returns:
        CheckReportResponse with one result per rule
    """
    slug = authority_slug(authority)
    logger.info("Received drawing check request", filename=file.filename, authority=slug)

    if not is_pdf(file.filename, file.content_type):
        raise HTTPException(status_code=400, detail="Only PDF drawings are supported")

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_mb}MB",
        )

    rules = _load_rules(slug)

    try:
        text = await extract_pdf_text_async(content, file.filename)
    except TextExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = _build_report(slug, rules, text)
    logger.info(
        "Drawing check completed",
        filename=file.filename,
        authority=slug,
        passed=report.summary.passed_checks,
        failed=report.summary.failed_checks,
    )
    return report


@router.post("/check-text", response_model=CheckReportResponse)
async def check_text(request: CheckTextRequest):
    """Check already-extracted drawing text.

    Inline ``rules`` take precedence over the stored rule set of ``authority``.

    Args:
        request: Text plus an authority or an inline rule set

    Returns:
        CheckReportResponse with one result per rule
    """
    slug = authority_slug(request.authority) if request.authority else None

    if request.rules is not None:
        rules = request.rules
        logger.info("Checking text with inline rules", rule_count=len(rules), characters=len(request.text))
    elif slug is not None:
        rules = _load_rules(slug)
        logger.info("Checking text with stored rules", authority=slug, characters=len(request.text))
    else:
        raise HTTPException(status_code=400, detail="Either authority or rules must be provided")

    return _build_report(slug, rules, request.text)
