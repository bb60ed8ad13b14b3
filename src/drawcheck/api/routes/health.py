"""Health check endpoints."""
from fastapi import APIRouter

from drawcheck.config import settings
from drawcheck.models import HealthResponse
from drawcheck.azure import get_openai_client
from drawcheck.services.rule_store import get_rule_store
from drawcheck.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for all services.

    The language model is reported healthy in DEV_MODE, where extraction uses
    the mock backend.

    Returns:
        HealthResponse with status of the rule store and Azure OpenAI
    """
    logger.info("Performing health check")

    services_status = {
        "openai": False,
        "rule_store": False,
    }

    if settings.dev_mode:
        services_status["openai"] = True
    else:
        try:
            openai_client = get_openai_client()
            services_status["openai"] = await openai_client.health_check()
        except Exception as e:
            logger.error("OpenAI health check error", error=str(e))

    try:
        rule_store = get_rule_store()
        services_status["rule_store"] = await rule_store.health_check()
    except Exception as e:
        logger.error("Rule store health check error", error=str(e))

    # Determine overall status
    all_healthy = all(services_status.values())
    status = "healthy" if all_healthy else "degraded"

    logger.info("Health check completed", status=status, services=services_status)

    return HealthResponse(
        status=status,
        services=services_status
    )
