"""TrialResult — one oracle trial's proposed ticket → engineer mapping."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TrialResult:
    trial_index: int
    assignments: dict[str, str] = field(default_factory=dict)
    reasoning: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    def is_valid(self) -> bool:
        return bool(self.assignments)

    @classmethod
    def failed(cls, trial_index: int, error: str) -> "TrialResult":
        return cls(trial_index=trial_index, error=error)
