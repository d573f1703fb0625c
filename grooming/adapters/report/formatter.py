"""Plain-text rendering of a grooming result, grouped by engineer."""

from __future__ import annotations

from grooming.domain.entities.recommendation import AssignmentRecommendation, GroomingResult

MAX_SUMMARY_LENGTH = 60


def _short(summary: str, limit: int = MAX_SUMMARY_LENGTH) -> str:
    return summary if len(summary) <= limit else summary[: limit - 3] + "..."


def group_by_engineer(
    recommendations: list[AssignmentRecommendation],
) -> list[tuple[str, list[AssignmentRecommendation]]]:
    """Engineers sorted by number of tickets (desc), then by name."""
    grouped: dict[str, list[AssignmentRecommendation]] = {}
    for rec in recommendations:
        grouped.setdefault(rec.recommended_engineer, []).append(rec)
    return sorted(grouped.items(), key=lambda item: (-len(item[1]), item[0]))


def format_recommendations(result: GroomingResult, verbose: bool = False) -> str:
    lines: list[str] = []
    groups = group_by_engineer(result.recommendations)

    for engineer, recs in groups:
        lines.append(f"\n{engineer}:")
        for num, rec in enumerate(recs, start=1):
            tag = f" ({rec.confidence} agreement)" if rec.confidence else ""
            if verbose:
                lines.append(f"  {num}. [{rec.ticket_key}] {rec.summary}{tag}")
                lines.append(f"     Category: {rec.category}")
                if rec.reasoning:
                    lines.append(f"     Reason: {rec.reasoning}")
            else:
                lines.append(f"  {num}. [{rec.ticket_key}] {_short(rec.summary)}{tag}")

    lines.append(f"\n{len(result.recommendations)} tickets assigned across {len(groups)} engineers")

    if result.fallback_used:
        lines.append("\nNote: all consensus trials failed; showing a single-call recommendation.")

    if result.not_found_tickets:
        lines.append(f"\nWarning: {len(result.not_found_tickets)} tickets not found in Jira:")
        lines.append(f"  {', '.join(result.not_found_tickets)}")

    return "\n".join(lines)
