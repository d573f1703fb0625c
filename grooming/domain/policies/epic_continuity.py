"""EpicContinuityPolicy — who already works on the epic a ticket belongs to."""

from __future__ import annotations

from collections.abc import Sequence

from grooming.domain.entities.continuity_signal import EpicContinuitySignal
from grooming.domain.entities.engineer_profile import EngineerProfile
from grooming.domain.entities.grooming_ticket import GroomingTicket

MAX_SIBLING_EXAMPLES = 3


def find_siblings(ticket: GroomingTicket, profile: EngineerProfile) -> list[str]:
    """Ids of the engineer's tickets under the same parent, excluding the ticket itself."""
    if not ticket.parent:
        return []
    return [
        record.ticket_id
        for record in profile.recent_tickets
        if record.parent == ticket.parent and record.ticket_id != ticket.ticket_key
    ]


def build_epic_continuity_signals(
    tickets: Sequence[GroomingTicket],
    profiles: Sequence[EngineerProfile],
) -> list[EpicContinuitySignal]:
    """Emit one signal per (ticket with a parent, engineer with ≥1 sibling).

    Args:
        tickets: tickets pending assignment.
        profiles: candidate engineers with their history.

    Returns:
        Signals in ticket order, then profile order. Empty when no ticket
        has a parent or nobody touched the same epic.
    """
    signals: list[EpicContinuitySignal] = []

    for ticket in tickets:
        if not ticket.parent:
            continue
        for profile in profiles:
            siblings = find_siblings(ticket, profile)
            if not siblings:
                continue
            signals.append(
                EpicContinuitySignal(
                    ticket_key=ticket.ticket_key,
                    epic_key=ticket.parent,
                    epic_summary=ticket.parent_summary,
                    engineer_name=profile.name,
                    sibling_count=len(siblings),
                    sibling_tickets=tuple(siblings[:MAX_SIBLING_EXAMPLES]),
                )
            )

    return signals


def signals_for_ticket(
    signals: Sequence[EpicContinuitySignal], ticket_key: str
) -> list[EpicContinuitySignal]:
    return [s for s in signals if s.ticket_key == ticket_key]
