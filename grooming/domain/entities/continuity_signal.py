"""EpicContinuitySignal — evidence that an engineer already works on an epic."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EpicContinuitySignal:
    ticket_key: str
    epic_key: str
    epic_summary: str | None
    engineer_name: str
    sibling_count: int
    sibling_tickets: tuple[str, ...] = ()
