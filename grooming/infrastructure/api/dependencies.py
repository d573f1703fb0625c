"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from grooming.adapters.jira.jira_adapter import JiraAdapter
from grooming.adapters.llm.openai_adapter import OpenAIAdapter
from grooming.application.use_cases.build_consensus import BuildConsensusUseCase
from grooming.application.use_cases.generate_recommendations import (
    GenerateRecommendationsUseCase,
)
from grooming.application.use_cases.run_trials import RunTrialsUseCase
from grooming.config import settings

# Singleton adapters (stateless)
_oracle_adapter = OpenAIAdapter()
_jira_adapter = JiraAdapter()


def get_run_trials_uc() -> RunTrialsUseCase:
    return RunTrialsUseCase(
        oracle=_oracle_adapter,
        trials=settings.consensus_trials,
        trial_temperature=settings.trial_temperature,
        fallback_temperature=settings.llm_temperature,
    )


def get_build_consensus_uc() -> BuildConsensusUseCase:
    return BuildConsensusUseCase(
        oracle=_oracle_adapter,
        rationale_temperature=settings.llm_temperature,
    )


def get_generate_recommendations_uc() -> GenerateRecommendationsUseCase:
    return GenerateRecommendationsUseCase(
        ticket_source=_jira_adapter,
        history_source=_jira_adapter,
        run_trials=get_run_trials_uc(),
        build_consensus=get_build_consensus_uc(),
        engineers=settings.engineer_emails or None,
        lookback_days=settings.grooming_lookback_days,
    )
