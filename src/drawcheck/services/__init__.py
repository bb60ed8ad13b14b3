"""Services initialization."""
from drawcheck.services.rule_store import RuleStore, RuleSetNotFoundError, authority_slug, get_rule_store
from drawcheck.services.text_extractor import (
    TextExtractionError,
    DocumentFetchError,
    extract_pdf_text,
    extract_pdf_text_async,
    fetch_document,
    is_pdf,
)
from drawcheck.services.rule_extractor import (
    RuleExtractionBackend,
    RuleExtractionError,
    RuleExtractionService,
    MockRuleBackend,
    OpenAIRuleBackend,
    get_rule_extractor,
)

__all__ = [
    "RuleStore",
    "RuleSetNotFoundError",
    "authority_slug",
    "get_rule_store",
    "TextExtractionError",
    "DocumentFetchError",
    "extract_pdf_text",
    "extract_pdf_text_async",
    "fetch_document",
    "is_pdf",
    "RuleExtractionBackend",
    "RuleExtractionError",
    "RuleExtractionService",
    "MockRuleBackend",
    "OpenAIRuleBackend",
    "get_rule_extractor",
]
