"""Rule set endpoints."""
from fastapi import APIRouter, HTTPException, Query

from drawcheck.models import RulesResponse
from drawcheck.services.rule_store import RuleSetNotFoundError, authority_slug, get_rule_store
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/rules", response_model=RulesResponse)
async def get_rules(authority: str = Query("UNKNOWN", description="Authority name or slug")):
    """Get the stored rule set of an authority.

    Returns:
        RulesResponse with the rules as stored
    """
    slug = authority_slug(authority)
    try:
        rules = get_rule_store().load(slug)
    except RuleSetNotFoundError:
        raise HTTPException(status_code=404, detail=f"Rules not found for authority {slug}")
    except ValueError as e:
        logger.error("Stored rule set is unusable", authority=slug, error=str(e))
        raise HTTPException(status_code=500, detail=str(e))

    return RulesResponse(authority=slug, count=len(rules), rules=rules)
