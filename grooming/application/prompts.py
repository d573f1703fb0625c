"""Prompt construction for the recommendation oracle."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from grooming.domain.entities.continuity_signal import EpicContinuitySignal
from grooming.domain.entities.engineer_profile import EngineerProfile
from grooming.domain.entities.grooming_ticket import GroomingTicket
from grooming.domain.entities.recommendation import AssignmentRecommendation
from grooming.domain.policies.epic_continuity import signals_for_ticket

MAX_DESCRIPTION_LENGTH = 500
MAX_RECENT_TICKETS = 10

ASSIGNMENT_OUTPUT_SCHEMA = """\
{
  "assignments": [
    {
      "ticket_key": "<ticket key exactly as given>",
      "engineer": "<engineer name exactly as listed>"%s
    }
  ]
}"""

RATIONALE_OUTPUT_SCHEMA = """\
{
  "rationales": [
    {
      "ticket_key": "<ticket key exactly as given>",
      "reasoning": "<one or two sentences>"
    }
  ]
}"""


@dataclass(frozen=True)
class TrialPayload:
    """Shared, read-only input of every trial in a run."""

    tickets: tuple[GroomingTicket, ...]
    profiles: tuple[EngineerProfile, ...]
    signals: tuple[EpicContinuitySignal, ...] = ()

    @property
    def engineer_names(self) -> frozenset[str]:
        return frozenset(p.name for p in self.profiles)

    @property
    def ticket_keys(self) -> frozenset[str]:
        return frozenset(t.ticket_key for t in self.tickets)


def _truncate(text: str, limit: int) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[:limit] + "..."


def format_profile(profile: EngineerProfile) -> str:
    lines = [f"### {profile.name}"]
    lines.append(f"  Current workload: {profile.current_workload} active tickets")
    if profile.specializations:
        lines.append(f"  Specializations: {', '.join(profile.specializations)}")
    recent = profile.recent_tickets[:MAX_RECENT_TICKETS]
    if recent:
        lines.append("  Recent tickets:")
        for record in recent:
            epic = f" (epic: {record.parent})" if record.parent else ""
            lines.append(f"    - [{record.ticket_id}] {record.summary} [{record.status}]{epic}")
    return "\n".join(lines)


def format_signal(signal: EpicContinuitySignal) -> str:
    epic = f"{signal.epic_key} ({signal.epic_summary})" if signal.epic_summary else signal.epic_key
    examples = ", ".join(signal.sibling_tickets)
    return (
        f"  - {signal.engineer_name} has worked on {signal.sibling_count} "
        f"ticket(s) under epic {epic}: {examples}"
    )


def format_ticket(ticket: GroomingTicket, signals: Sequence[EpicContinuitySignal]) -> str:
    lines = [f"[{ticket.ticket_key}] {ticket.summary}", f"  Category: {ticket.category}"]

    hints = []
    if ticket.labels:
        hints.append(f"Labels: {', '.join(ticket.labels)}")
    if ticket.components:
        hints.append(f"Components: {', '.join(ticket.components)}")
    if hints:
        lines.append(f"  Domain hints: {' | '.join(hints)}")

    parent_context = ticket.parent_context()
    if parent_context:
        lines.append(f"  {parent_context}")

    if ticket.description and ticket.description.strip() and ticket.description != "No description":
        lines.append(f"  Description: {_truncate(ticket.description, MAX_DESCRIPTION_LENGTH)}")

    own = signals_for_ticket(signals, ticket.ticket_key)
    if own:
        lines.append("  Epic continuity:")
        lines.extend(format_signal(s) for s in own)

    return "\n".join(lines)


def _context_sections(payload: TrialPayload) -> str:
    engineers = "\n\n".join(format_profile(p) for p in payload.profiles)
    tickets = "\n\n".join(format_ticket(t, payload.signals) for t in payload.tickets)
    return f"ENGINEERS:\n\n{engineers}\n\nTICKETS TO ASSIGN:\n\n{tickets}"


def build_assignment_prompt(payload: TrialPayload, verbose: bool = False) -> str:
    """Prompt asking for exactly one engineer per ticket, as JSON."""
    reasoning_field = ',\n      "reasoning": "<one or two sentences>"' if verbose else ""
    schema = ASSIGNMENT_OUTPUT_SCHEMA % reasoning_field

    return f"""You are helping an engineering manager groom the backlog. Recommend one \
engineer from the list below for every ticket.

PRIORITIZATION:
1. Epic continuity is the strongest signal: prefer an engineer who already worked on \
tickets under the same epic.
2. Then match specializations (components and labels) to the ticket's domain hints.
3. Then balance current workload; avoid piling tickets on one person.

Only use engineer names exactly as listed. Assign every ticket exactly once.

{_context_sections(payload)}

Return ONLY valid JSON in this shape:
{schema}"""


def build_rationale_prompt(
    payload: TrialPayload,
    recommendations: Sequence[AssignmentRecommendation],
) -> str:
    """Prompt asking to justify already-decided assignments. It must not change them."""
    decided = "\n".join(
        f"  - [{r.ticket_key}] → {r.recommended_engineer}"
        for r in recommendations
        if r.is_determined()
    )

    return f"""The following ticket assignments have already been decided by a panel \
vote. Do not change them. For each one, write a short justification referencing epic \
continuity, specializations or workload where relevant.

DECIDED ASSIGNMENTS:
{decided}

{_context_sections(payload)}

Return ONLY valid JSON in this shape:
{RATIONALE_OUTPUT_SCHEMA}"""
