"""GenerateRecommendationsUseCase — full grooming run: parse → fetch → profile → vote."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from grooming.adapters.ticket_list.parser import ParsedTicket, parse_ticket_list
from grooming.application.ports.ticket_source import TicketSource
from grooming.application.ports.work_history_source import WorkHistorySource
from grooming.application.prompts import TrialPayload
from grooming.application.use_cases.build_consensus import BuildConsensusUseCase
from grooming.application.use_cases.run_trials import RunTrialsUseCase
from grooming.domain.entities.grooming_ticket import GroomingTicket
from grooming.domain.entities.recommendation import GroomingResult
from grooming.domain.entities.work_record import WorkRecord
from grooming.domain.policies.engineer_profiles import build_engineer_profiles
from grooming.domain.policies.epic_continuity import build_epic_continuity_signals
from grooming.domain.value_objects.profile_rules import ProfileRules

logger = logging.getLogger(__name__)


class GroomingError(ValueError):
    """A grooming run cannot proceed."""


class EmptyTicketListError(GroomingError):
    pass


class NoEngineersAvailableError(GroomingError):
    pass


def build_grooming_tickets(
    parsed: Sequence[ParsedTicket],
    found: Sequence[WorkRecord],
) -> list[GroomingTicket]:
    """Merge parsed list entries with resolved records.

    Only resolved tickets are kept, in list order, one per key.
    """
    by_key = {record.ticket_id: record for record in found}
    tickets: dict[str, GroomingTicket] = {}

    for entry in parsed:
        record = by_key.get(entry.ticket_key)
        if record is None or entry.ticket_key in tickets:
            continue
        tickets[entry.ticket_key] = GroomingTicket(
            ticket_key=entry.ticket_key,
            category=entry.category,
            summary=record.summary or entry.title,
            description=record.description or "",
            labels=record.labels,
            components=record.components,
            parent=record.parent,
            parent_summary=record.parent_summary,
        )

    return list(tickets.values())


class GenerateRecommendationsUseCase:
    """Orchestrates one grooming run end to end."""

    def __init__(
        self,
        ticket_source: TicketSource,
        history_source: WorkHistorySource,
        run_trials: RunTrialsUseCase,
        build_consensus: BuildConsensusUseCase,
        engineers: list[str] | None = None,
        lookback_days: int | None = None,
        rules: ProfileRules | None = None,
    ):
        self._tickets = ticket_source
        self._history = history_source
        self._run_trials = run_trials
        self._consensus = build_consensus
        self._engineers = engineers
        self._lookback_days = lookback_days
        self._rules = rules or ProfileRules()

    async def execute(self, ticket_list: str, verbose: bool = False) -> GroomingResult:
        """Produce one recommendation per resolvable ticket in ``ticket_list``.

        Pipeline:
        1. Parse the PM ticket list
        2. Resolve tickets (unresolved keys are reported, not fatal)
        3. Fetch engineer history and build profiles
        4. Build epic continuity signals
        5. Run trials (or the single-call fallback)
        6. Aggregate by majority vote, optionally attach rationale

        Raises:
            EmptyTicketListError: the list contains no ticket references.
            NoEngineersAvailableError: no engineer profiles could be built.
        """
        parsed = parse_ticket_list(ticket_list)
        if not parsed.tickets:
            raise EmptyTicketListError(
                "No tickets found in ticket list. Make sure it contains Jira URLs."
            )
        if parsed.unparsed_lines:
            logger.warning(
                "%d lines could not be parsed: %s",
                len(parsed.unparsed_lines), ", ".join(parsed.unparsed_lines[:3]),
            )

        requested = parsed.unique_keys()
        lookup = await self._tickets.fetch_by_keys(requested)
        tickets = build_grooming_tickets(parsed.tickets, lookup.found)

        # every requested key is either recommended on or reported
        matched = {t.ticket_key for t in tickets}
        not_found = [key for key in requested if key not in matched]
        if not_found:
            logger.warning("%d tickets not found: %s", len(not_found), ", ".join(not_found))

        history = await self._history.fetch_engineer_history(self._engineers, self._lookback_days)
        profiles = build_engineer_profiles(history, self._rules)
        if not profiles:
            raise NoEngineersAvailableError(
                "No engineer profiles found. Check the grooming engineer configuration."
            )
        logger.info("Built %d engineer profiles", len(profiles))

        result = GroomingResult(
            recommendations=[],
            engineer_profiles=profiles,
            not_found_tickets=not_found,
            unparsed_lines=list(parsed.unparsed_lines),
        )
        if not tickets:
            logger.warning("None of the requested tickets could be resolved, nothing to assign")
            return result

        signals = build_epic_continuity_signals(tickets, profiles)
        logger.info("Found %d epic continuity signals", len(signals))

        payload = TrialPayload(tickets=tuple(tickets), profiles=tuple(profiles), signals=tuple(signals))
        outcome = await self._run_trials.execute(payload, verbose=verbose)

        if outcome.fallback_used:
            result.recommendations = outcome.fallback_recommendations
            result.fallback_used = True
            return result

        result.valid_trials = len(outcome.valid_trials)
        result.recommendations = await self._consensus.execute(
            payload, outcome.valid_trials, verbose=verbose
        )
        return result
