"""Health check endpoint."""

from fastapi import APIRouter

from grooming.adapters.llm.openai_adapter import is_placeholder_key
from grooming.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Report whether the external collaborators are configured."""
    jira_configured = bool(settings.jira_url and settings.jira_username and settings.jira_token)
    oracle_configured = not is_placeholder_key(settings.openai_api_key)

    return {
        "status": "ok" if jira_configured and oracle_configured else "degraded",
        "jira": "configured" if jira_configured else "missing credentials",
        "oracle": settings.openai_model if oracle_configured else "missing api key",
        "service": "Grooming assignment recommender",
    }
