"""GroomingTicket entity — a unit of work waiting for an assignee."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GroomingTicket:
    ticket_key: str
    category: str
    summary: str
    description: str = ""
    labels: tuple[str, ...] = ()
    components: tuple[str, ...] = ()
    parent: str | None = None
    parent_summary: str | None = None

    def parent_context(self) -> str | None:
        """Human-readable epic reference, e.g. "Part of: Billing revamp (EPIC-1)"."""
        if self.parent and self.parent_summary:
            return f"Part of: {self.parent_summary} ({self.parent})"
        if self.parent:
            return f"Part of: {self.parent}"
        return None
