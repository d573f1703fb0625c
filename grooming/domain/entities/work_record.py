"""WorkRecord entity — one historical ticket worked by an engineer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkRecord:
    ticket_id: str
    summary: str
    status: str
    assignee: str = "Unassigned"
    issue_type: str | None = None
    description: str = ""
    labels: tuple[str, ...] = ()
    components: tuple[str, ...] = ()
    parent: str | None = None
    parent_summary: str | None = None
