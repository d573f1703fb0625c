"""Grooming endpoints — consensus assignment recommendations."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from grooming.adapters.report.formatter import format_recommendations
from grooming.application.use_cases.generate_recommendations import (
    GenerateRecommendationsUseCase,
    GroomingError,
)
from grooming.infrastructure.api.dependencies import get_generate_recommendations_uc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grooming", tags=["grooming"])


# ── Request / Response schemas ──────────────────────────────────────

class RecommendationRequest(BaseModel):
    ticket_list: str
    verbose: bool = False


class RecommendationItem(BaseModel):
    ticket_key: str
    category: str
    summary: str
    recommended_engineer: str
    confidence: str | None = None
    reasoning: str | None = None


class EngineerItem(BaseModel):
    name: str
    current_workload: int
    specializations: list[str]
    recent_ticket_count: int


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationItem]
    engineers: list[EngineerItem]
    not_found_tickets: list[str]
    unparsed_lines: list[str]
    valid_trials: int
    fallback_used: bool
    report: str


@router.post("/recommendations", response_model=RecommendationResponse)
async def generate_recommendations(
    body: RecommendationRequest,
    uc: GenerateRecommendationsUseCase = Depends(get_generate_recommendations_uc),
):
    """Run the multi-trial consensus over a PM ticket list."""
    try:
        result = await uc.execute(body.ticket_list, verbose=body.verbose)
    except GroomingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Error generating grooming recommendations")
        raise HTTPException(status_code=500, detail=str(e))

    return RecommendationResponse(
        recommendations=[
            RecommendationItem(
                ticket_key=r.ticket_key,
                category=r.category,
                summary=r.summary,
                recommended_engineer=r.recommended_engineer,
                confidence=r.confidence,
                reasoning=r.reasoning,
            )
            for r in result.recommendations
        ],
        engineers=[
            EngineerItem(
                name=p.name,
                current_workload=p.current_workload,
                specializations=list(p.specializations),
                recent_ticket_count=len(p.recent_tickets),
            )
            for p in result.engineer_profiles
        ],
        not_found_tickets=result.not_found_tickets,
        unparsed_lines=result.unparsed_lines,
        valid_trials=result.valid_trials,
        fallback_used=result.fallback_used,
        report=format_recommendations(result, verbose=body.verbose),
    )
