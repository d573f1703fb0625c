"""RunTrialsUseCase — fan out N independent oracle trials, fall back to one call."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from grooming.application.ports.oracle_port import RecommendationOracle
from grooming.application.prompts import TrialPayload, build_assignment_prompt
from grooming.application.responses import parse_assignments
from grooming.domain.entities.recommendation import (
    UNABLE_TO_DETERMINE,
    AssignmentRecommendation,
)
from grooming.domain.entities.trial_result import TrialResult

logger = logging.getLogger(__name__)

DEFAULT_TRIALS = 5


@dataclass
class TrialOutcome:
    """What the orchestrator hands to the aggregator.

    Exactly one of the two is meaningful: ``valid_trials`` when at least one
    trial produced a mapping, ``fallback_recommendations`` otherwise.
    """

    trials: list[TrialResult] = field(default_factory=list)
    fallback_recommendations: list[AssignmentRecommendation] | None = None

    @property
    def valid_trials(self) -> list[TrialResult]:
        return [t for t in self.trials if t.is_valid()]

    @property
    def fallback_used(self) -> bool:
        return self.fallback_recommendations is not None


class RunTrialsUseCase:
    """Orchestrates the parallel trial batch and the single-call fallback."""

    def __init__(
        self,
        oracle: RecommendationOracle,
        trials: int = DEFAULT_TRIALS,
        trial_temperature: float = 0.8,
        fallback_temperature: float = 0.3,
    ):
        if trials < 1:
            raise ValueError("At least one trial is required")
        self._oracle = oracle
        self._trials = trials
        self._trial_temperature = trial_temperature
        self._fallback_temperature = fallback_temperature

    async def execute(self, payload: TrialPayload, verbose: bool = False) -> TrialOutcome:
        """Run N trials concurrently; if none is usable, make one fallback call.

        Trials share only the immutable prompt. The batch waits for every
        trial to settle; a failing trial yields an empty result.
        """
        prompt = build_assignment_prompt(payload, verbose=False)
        logger.info(
            "Dispatching %d trials for %d tickets across %d engineers",
            self._trials, len(payload.tickets), len(payload.profiles),
        )

        results = await asyncio.gather(
            *(self._run_trial(i, prompt, payload) for i in range(self._trials)),
            return_exceptions=True,
        )

        trials = []
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                logger.warning("Trial %d crashed: %s", index + 1, result)
                trials.append(TrialResult.failed(index, str(result)))
            else:
                trials.append(result)

        outcome = TrialOutcome(trials=trials)
        valid = len(outcome.valid_trials)
        logger.info("%d/%d trials produced usable recommendations", valid, self._trials)

        if valid == 0:
            logger.warning("All %d trials failed, falling back to a single call", self._trials)
            outcome.fallback_recommendations = await self._fallback(payload, verbose)

        return outcome

    async def _run_trial(self, index: int, prompt: str, payload: TrialPayload) -> TrialResult:
        try:
            raw = await self._oracle.complete(prompt, self._trial_temperature)
            assignments, reasoning = parse_assignments(
                raw, payload.ticket_keys, payload.engineer_names
            )
        except Exception as e:
            logger.warning("Trial %d failed: %s", index + 1, e)
            return TrialResult.failed(index, str(e))

        if not assignments:
            logger.warning("Trial %d returned no usable assignments", index + 1)
        return TrialResult(trial_index=index, assignments=assignments, reasoning=reasoning)

    async def _fallback(
        self, payload: TrialPayload, verbose: bool
    ) -> list[AssignmentRecommendation]:
        """Single non-parallel call; its answer is final, there is nothing to vote on."""
        assignments: dict[str, str] = {}
        reasoning: dict[str, str] = {}
        try:
            raw = await self._oracle.complete(
                build_assignment_prompt(payload, verbose=verbose),
                self._fallback_temperature,
            )
            assignments, reasoning = parse_assignments(
                raw, payload.ticket_keys, payload.engineer_names
            )
        except Exception:
            logger.exception("Fallback call failed, no recommendations available")

        return [
            AssignmentRecommendation(
                ticket_key=ticket.ticket_key,
                category=ticket.category,
                summary=ticket.summary,
                recommended_engineer=assignments.get(ticket.ticket_key, UNABLE_TO_DETERMINE),
                confidence="1/1" if ticket.ticket_key in assignments else None,
                reasoning=reasoning.get(ticket.ticket_key) if verbose else None,
            )
            for ticket in payload.tickets
        ]
