"""ConsensusPolicy — majority vote across independent oracle trials."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from grooming.domain.entities.grooming_ticket import GroomingTicket
from grooming.domain.entities.recommendation import (
    UNABLE_TO_DETERMINE,
    AssignmentRecommendation,
)
from grooming.domain.entities.trial_result import TrialResult


@dataclass(frozen=True)
class VoteOutcome:
    """Result of tallying one ticket."""

    winner: str
    votes: int
    tally: dict[str, int]


def tally_votes(ticket_key: str, trials: Sequence[TrialResult]) -> dict[str, int]:
    """Count votes per engineer; keys are ordered by first appearance in ``trials``."""
    tally: dict[str, int] = {}
    for trial in trials:
        engineer = trial.assignments.get(ticket_key)
        if engineer:
            tally[engineer] = tally.get(engineer, 0) + 1
    return tally


def pick_winner(tally: dict[str, int]) -> tuple[str, int]:
    """Strictly highest count wins; on a tie the first-encountered name wins.

    Returns the sentinel with zero votes for an empty tally.
    """
    winner, best = UNABLE_TO_DETERMINE, 0
    for engineer, votes in tally.items():
        if votes > best:
            winner, best = engineer, votes
    return winner, best


def decide(ticket_key: str, trials: Sequence[TrialResult]) -> VoteOutcome:
    tally = tally_votes(ticket_key, trials)
    winner, votes = pick_winner(tally)
    return VoteOutcome(winner=winner, votes=votes, tally=tally)


def format_confidence(votes: int, valid_trials: int) -> str:
    return f"{votes}/{valid_trials}"


def aggregate_consensus(
    tickets: Sequence[GroomingTicket],
    trials: Sequence[TrialResult],
) -> list[AssignmentRecommendation]:
    """Collapse valid trials into exactly one recommendation per ticket.

    Invalid (empty) trials are ignored; the confidence denominator is the
    number of valid trials, not the number dispatched.

    Args:
        tickets: the original ticket list, in output order.
        trials: trial results in dispatch order.

    Returns:
        One AssignmentRecommendation per ticket.
    """
    valid = [t for t in trials if t.is_valid()]
    recommendations = []

    for ticket in tickets:
        outcome = decide(ticket.ticket_key, valid)
        recommendations.append(
            AssignmentRecommendation(
                ticket_key=ticket.ticket_key,
                category=ticket.category,
                summary=ticket.summary,
                recommended_engineer=outcome.winner,
                confidence=format_confidence(outcome.votes, len(valid)),
            )
        )

    return recommendations
