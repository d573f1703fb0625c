"""BuildConsensusUseCase — majority vote, then optional rationale enrichment."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from grooming.application.ports.oracle_port import RecommendationOracle
from grooming.application.prompts import TrialPayload, build_rationale_prompt
from grooming.application.responses import parse_rationales
from grooming.domain.entities.recommendation import AssignmentRecommendation
from grooming.domain.entities.trial_result import TrialResult
from grooming.domain.policies.consensus import aggregate_consensus

logger = logging.getLogger(__name__)


class BuildConsensusUseCase:
    def __init__(self, oracle: RecommendationOracle, rationale_temperature: float = 0.3):
        self._oracle = oracle
        self._rationale_temperature = rationale_temperature

    async def execute(
        self,
        payload: TrialPayload,
        trials: Sequence[TrialResult],
        verbose: bool = False,
    ) -> list[AssignmentRecommendation]:
        """Aggregate trials into final recommendations.

        Winners and confidence are fixed before the rationale call; a
        failed rationale call returns them unchanged.
        """
        recommendations = aggregate_consensus(payload.tickets, trials)
        logger.info(
            "Consensus reached for %d tickets from %d valid trials",
            len(recommendations), sum(1 for t in trials if t.is_valid()),
        )

        if not verbose:
            return recommendations
        return await self.attach_rationale(payload, recommendations)

    async def attach_rationale(
        self,
        payload: TrialPayload,
        recommendations: list[AssignmentRecommendation],
    ) -> list[AssignmentRecommendation]:
        if not any(r.is_determined() for r in recommendations):
            return recommendations

        try:
            raw = await self._oracle.complete(
                build_rationale_prompt(payload, recommendations),
                self._rationale_temperature,
            )
            rationales = parse_rationales(raw, payload.ticket_keys)
        except Exception as e:
            logger.warning("Rationale enrichment failed, returning bare recommendations: %s", e)
            return recommendations

        logger.info("Attached rationale to %d/%d recommendations", len(rationales), len(recommendations))
        return [
            dataclasses.replace(r, reasoning=rationales[r.ticket_key])
            if r.is_determined() and r.ticket_key in rationales
            else r
            for r in recommendations
        ]
