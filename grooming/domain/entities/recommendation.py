"""AssignmentRecommendation — the final per-ticket answer of a grooming run."""

from dataclasses import dataclass, field

from grooming.domain.entities.engineer_profile import EngineerProfile

UNABLE_TO_DETERMINE = "Unable to determine"


@dataclass(frozen=True)
class AssignmentRecommendation:
    ticket_key: str
    category: str
    summary: str
    recommended_engineer: str
    confidence: str | None = None
    reasoning: str | None = None

    def is_determined(self) -> bool:
        return self.recommended_engineer != UNABLE_TO_DETERMINE


@dataclass
class GroomingResult:
    """Everything a caller needs to render an assignment report."""

    recommendations: list[AssignmentRecommendation]
    engineer_profiles: list[EngineerProfile]
    not_found_tickets: list[str] = field(default_factory=list)
    unparsed_lines: list[str] = field(default_factory=list)
    valid_trials: int = 0
    fallback_used: bool = False
