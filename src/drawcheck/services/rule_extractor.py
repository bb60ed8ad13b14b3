"""Rule extraction service - turns building-code text into rule sets.

Extraction is a two-step conversation with a language model: first each
chunk of the code document is mined for checkable clauses (candidates),
then each candidate is normalized into a rule. The model sits behind the
``RuleExtractionBackend`` interface so the pipeline can run against Azure
OpenAI or a deterministic mock (``DEV_MODE``).
"""
import json
import re
from typing import Any, Dict, List, Optional, Protocol
from uuid import uuid4

import anyio
from pydantic import ValidationError

from drawcheck.azure import get_openai_client
from drawcheck.azure.openai_client import OpenAIClient
from drawcheck.config import settings
from drawcheck.models import ExtractionResponse, Rule
from drawcheck.services.rule_store import RuleStore, authority_slug, get_rule_store
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)

EXTRACTION_SYSTEM_PROMPT = "You are a building code analyst. Output JSON only."
NORMALIZER_SYSTEM_PROMPT = "You are a normalizer. Output JSON only."

SOURCE_PREVIEW_CHARS = 200

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_JSON_ARRAY = re.compile(r"(\[[\s\S]*\])")
_JSON_OBJECT = re.compile(r"(\{[\s\S]*\})")


class RuleExtractionError(RuntimeError):
    """Raised when the language model backend fails during extraction."""


def chunk_text(text: str, max_chars: int = 12000) -> List[str]:
    """Split text into chunks of whole paragraphs.

    Paragraphs are separated by blank lines. A paragraph longer than
    ``max_chars`` becomes a chunk of its own.

    Args:
        text: Document text
        max_chars: Soft size limit per chunk

    Returns:
        Non-empty chunks in document order
    """
    paragraphs = [p.strip() for p in re.split(r"\n{2,}", text or "")]
    chunks: List[str] = []
    buffer = ""
    for paragraph in paragraphs:
        if not paragraph:
            continue
        if buffer and len(buffer) + len(paragraph) > max_chars:
            chunks.append(buffer)
            buffer = ""
        buffer += paragraph + "\n\n"
    if buffer.strip():
        chunks.append(buffer)
    return chunks


def parse_json_payload(raw: Optional[str]) -> Any:
    """Parse JSON from a model response.

    Accepts bare JSON, JSON inside a markdown code block, or JSON embedded in
    surrounding prose (first array, then object).

    Args:
        raw: Model response text

    Returns:
        Parsed value, or None when no JSON could be recovered
    """
    if not raw or not isinstance(raw, str):
        return None

    candidates = [raw.strip()]
    fenced = _CODE_FENCE.search(raw)
    if fenced:
        candidates.append(fenced.group(1))
    for pattern in (_JSON_ARRAY, _JSON_OBJECT):
        match = pattern.search(raw)
        if match:
            candidates.append(match.group(1))

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    logger.warning("Could not parse JSON from model response", response_length=len(raw))
    return None


def build_extraction_prompt(chunk: str) -> str:
    """Build the clause extraction prompt for one chunk."""
    return f"""INPUT: Begin with the following building code text delimited by triple backticks:
```
{chunk}
```

TASK: From the provided text, extract clauses that can be turned into an automated compliance check.
For each clause return an object with: clause_reference, summary, clause_text,
suggested_type ("numeric" or "presence"), numeric_param, operator (>=, <=, >, <, =),
numeric_value, units (mm, cm or m), keywords (list of phrases), suggested_severity.
Return a strict JSON array."""


def build_normalization_prompt(candidate: Dict[str, Any], authority: str) -> str:
    """Build the prompt that turns a candidate clause into a rule."""
    return f"""INPUT OBJECT:
{json.dumps(candidate, ensure_ascii=False)}
AUTHORITY: {authority}

TASK: Normalize the input object into one rule with this shape:
{{"id": "<AUTHORITY>-<clause_reference>", "authority": "<AUTHORITY>", "section_title": "",
 "clause_reference": "", "short_description": "",
 "technical_check": {{"type": "numeric|presence|keyword", "field_path": "", "operator": "",
   "value": null, "units": "mm|cm|m|", "example_text_matches": []}},
 "human_review_required": true, "severity": "critical|warning|info", "confidence": 0.0,
 "raw_clause_text": "", "notes_for_reviewer": ""}}
Return a single JSON object."""


class RuleExtractionBackend(Protocol):
    """Language-model collaborator used by the extraction pipeline."""

    async def extract_candidate_rules(self, chunk: str) -> List[Dict[str, Any]]:
        """Return the candidate clauses found in one chunk of code text."""
        ...

    async def normalize_candidate(self, candidate: Dict[str, Any], authority: str) -> Optional[Dict[str, Any]]:
        """Return the normalized rule for a candidate, or None if it cannot be normalized."""
        ...


class OpenAIRuleBackend:
    """Backend calling the configured Azure OpenAI deployment."""

    def __init__(self, openai_client: Optional[OpenAIClient] = None):
        self.openai_client = openai_client or get_openai_client()

    async def _complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        params: Dict[str, Any] = {
            "model": settings.azure_openai_deployment_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if settings.azure_openai_reasoning_model:
            params["max_completion_tokens"] = max_tokens
        else:
            params["temperature"] = settings.extraction_temperature
            params["max_tokens"] = max_tokens

        def _call() -> str:
            response = self.openai_client.chat_completions_create(**params)
            return response.choices[0].message.content or ""

        return await anyio.to_thread.run_sync(_call)

    async def extract_candidate_rules(self, chunk: str) -> List[Dict[str, Any]]:
        raw = await self._complete(
            EXTRACTION_SYSTEM_PROMPT,
            build_extraction_prompt(chunk),
            settings.extraction_candidate_max_tokens,
        )
        parsed = parse_json_payload(raw)
        if isinstance(parsed, dict):
            parsed = [parsed]
        if not isinstance(parsed, list):
            return []
        return [item for item in parsed if isinstance(item, dict)]

    async def normalize_candidate(self, candidate: Dict[str, Any], authority: str) -> Optional[Dict[str, Any]]:
        raw = await self._complete(
            NORMALIZER_SYSTEM_PROMPT,
            build_normalization_prompt(candidate, authority),
            settings.extraction_normalize_max_tokens,
        )
        parsed = parse_json_payload(raw)
        if isinstance(parsed, list):
            parsed = parsed[0] if parsed else None
        return parsed if isinstance(parsed, dict) else None


class MockRuleBackend:
    """Deterministic backend for development and tests (``DEV_MODE``)."""

    async def extract_candidate_rules(self, chunk: str) -> List[Dict[str, Any]]:
        return [
            {
                "clause_reference": "EX-1",
                "summary": "Minimum corridor width 900 mm",
                "clause_text": "Corridor width shall not be less than 900 mm.",
                "suggested_type": "numeric",
                "numeric_param": "corridor width",
                "operator": ">=",
                "numeric_value": 900,
                "units": "mm",
                "keywords": [],
                "suggested_severity": "critical",
            },
            {
                "clause_reference": "EX-2",
                "summary": "Title block must contain revision number and date",
                "clause_text": "Each drawing shall contain a title block with revision number and date.",
                "suggested_type": "presence",
                "keywords": ["title block", "revision", "date"],
                "suggested_severity": "warning",
            },
        ]

    async def normalize_candidate(self, candidate: Dict[str, Any], authority: str) -> Optional[Dict[str, Any]]:
        clause_ref = candidate.get("clause_reference") or "EX-1"
        is_numeric = candidate.get("suggested_type") == "numeric"
        return {
            "id": f"{authority}-{clause_ref}",
            "authority": authority,
            "section_title": "Auto-extracted",
            "clause_reference": clause_ref,
            "short_description": candidate.get("summary") or "Auto-normalized rule",
            "technical_check": {
                "type": candidate.get("suggested_type") or "keyword",
                "field_path": "plan.dimensions.unknown" if is_numeric else "annotations.title_block",
                "operator": candidate.get("operator") or "present",
                "value": candidate.get("numeric_value"),
                "units": (candidate.get("units") or "mm") if is_numeric else "",
                "example_text_matches": candidate.get("keywords") or [],
            },
            "human_review_required": True,
            "severity": candidate.get("suggested_severity") or "warning",
            "confidence": 0.6,
            "raw_clause_text": candidate.get("clause_text") or "",
            "notes_for_reviewer": "DEV_MODE mock result",
        }


class RuleExtractionService:
    """Pipeline from building-code text to a persisted rule set."""

    def __init__(
        self,
        backend: RuleExtractionBackend,
        store: Optional[RuleStore] = None,
        chunk_chars: Optional[int] = None,
    ):
        """Initialize extraction service.

        Args:
            backend: Language-model collaborator
            store: Rule set store (default: global store)
            chunk_chars: Chunk size for the extraction step (default: from settings)
        """
        self.backend = backend
        self.store = store or get_rule_store()
        self.chunk_chars = chunk_chars or settings.extraction_chunk_chars

    async def process_text(self, text: str, authority: Optional[str]) -> ExtractionResponse:
        """Extract, normalize and persist the rules of a code document.

        Args:
            text: Building-code document text
            authority: Issuing authority; names the rule set file

        Returns:
            ExtractionResponse with the persisted rules

        Raises:
            RuleExtractionError: If the backend fails
        """
        slug = authority_slug(authority)
        chunks = chunk_text(text, self.chunk_chars)
        logger.info("Starting rule extraction", authority=slug, chunk_count=len(chunks), characters=len(text or ""))

        candidates: List[Dict[str, Any]] = []
        for index, chunk in enumerate(chunks):
            try:
                found = await self.backend.extract_candidate_rules(chunk)
            except Exception as e:
                logger.error("Candidate extraction failed", authority=slug, chunk_index=index, error=str(e))
                raise RuleExtractionError(f"Candidate extraction failed on chunk {index}: {e}") from e
            for candidate in found:
                candidates.append({**candidate, "_source_preview": chunk[:SOURCE_PREVIEW_CHARS]})

        logger.info("Candidates extracted", authority=slug, candidate_count=len(candidates))

        rules: List[Rule] = []
        for candidate in candidates:
            try:
                normalized = await self.backend.normalize_candidate(candidate, slug)
            except Exception as e:
                logger.error(
                    "Candidate normalization failed",
                    authority=slug,
                    clause_reference=candidate.get("clause_reference"),
                    error=str(e),
                )
                raise RuleExtractionError(f"Candidate normalization failed: {e}") from e

            if not normalized:
                logger.warning("Model returned no rule for candidate", clause_reference=candidate.get("clause_reference"))
                continue

            if not normalized.get("id"):
                normalized["id"] = f"{slug}-{normalized.get('clause_reference') or uuid4().hex[:6]}"
            if not normalized.get("authority"):
                normalized["authority"] = slug

            try:
                rules.append(Rule.model_validate(normalized))
            except ValidationError as e:
                logger.warning("Discarding malformed rule", rule_id=normalized.get("id"), error=str(e))

        path = self.store.save(slug, [rule.model_dump(mode="json") for rule in rules])
        stored = self.store.load(slug)
        logger.info("Rule extraction completed", authority=slug, rule_count=len(stored), file=str(path))

        return ExtractionResponse(
            count=len(stored),
            file=str(path),
            rules=[Rule.model_validate(rule) for rule in stored],
        )


# Global singleton instance
_rule_extractor: Optional[RuleExtractionService] = None


def get_rule_extractor() -> RuleExtractionService:
    """Get the global rule extraction service.

    Returns:
        RuleExtractionService using the mock backend in DEV_MODE and Azure
        OpenAI otherwise
    """
    global _rule_extractor
    if _rule_extractor is None:
        backend: RuleExtractionBackend = MockRuleBackend() if settings.dev_mode else OpenAIRuleBackend()
        _rule_extractor = RuleExtractionService(backend)
    return _rule_extractor
