"""ProfileRules — stoplists that drive engineer profile derivation."""

from dataclasses import dataclass

DEFAULT_ACTIVE_STATUSES = frozenset({
    "in progress",
    "in development",
    "in review",
    "code review",
    "testing",
    "qa",
})

DEFAULT_GENERIC_LABELS = frozenset({
    "bug",
    "feature",
    "enhancement",
    "task",
    "story",
    "spike",
    "tech-debt",
    "technical-debt",
    "backlog",
    "priority",
})

UNASSIGNED = "Unassigned"


@dataclass(frozen=True)
class ProfileRules:
    """Configuration data for the profile builder.

    Both sets hold lower-case values; lookups lower-case the candidate first.
    """

    active_statuses: frozenset[str] = DEFAULT_ACTIVE_STATUSES
    generic_labels: frozenset[str] = DEFAULT_GENERIC_LABELS
    unassigned_name: str = UNASSIGNED
    top_components: int = 3
    top_labels: int = 2

    def is_active(self, status: str) -> bool:
        return (status or "").strip().lower() in self.active_statuses

    def is_generic_label(self, label: str) -> bool:
        return label.lower() in self.generic_labels
