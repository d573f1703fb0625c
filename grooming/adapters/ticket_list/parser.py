"""Ticket list parser — reads a PM grooming message into ticket references.

Example input::

    Meetings:
    Add a "Add Meeting" button - https://acme.atlassian.net/browse/PY-11474
    PostHog:
    (Logan) Remove delighted survey - https://acme.atlassian.net/browse/PY-11417
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Uncategorized"

JIRA_URL_RE = re.compile(r"https?://[^/\s]+/browse/([A-Z][A-Z0-9]*-\d+)", re.IGNORECASE)
CATEGORY_RE = re.compile(r"^([^:]+):$")
TRAILING_SEPARATOR_RE = re.compile(r"[-–—]\s*$")
LEADING_OWNER_RE = re.compile(r"^\([^)]+\)\s*")


@dataclass(frozen=True)
class ParsedTicket:
    category: str
    ticket_key: str
    url: str
    title: str


@dataclass
class ParsedTicketList:
    tickets: list[ParsedTicket] = field(default_factory=list)
    unparsed_lines: list[str] = field(default_factory=list)

    def unique_keys(self) -> list[str]:
        return list(dict.fromkeys(t.ticket_key for t in self.tickets))


def _clean_title(prefix: str) -> str:
    title = TRAILING_SEPARATOR_RE.sub("", prefix.strip()).strip()
    return LEADING_OWNER_RE.sub("", title).strip()


def parse_ticket_list(message: str) -> ParsedTicketList:
    """Parse category headers and Jira browse URLs out of free text.

    - ``Something:`` on its own line (without a URL) starts a new category.
    - Each Jira URL on a line yields one ticket; the title is the text
      before that URL.
    - Non-empty lines with no URL end up in ``unparsed_lines``.
    """
    result = ParsedTicketList()
    category = DEFAULT_CATEGORY

    for line in (raw.strip() for raw in message.splitlines()):
        if not line:
            continue

        header = CATEGORY_RE.match(line)
        if header and "http" not in line:
            category = header.group(1).strip()
            continue

        matches = list(JIRA_URL_RE.finditer(line))
        if not matches:
            result.unparsed_lines.append(line)
            continue

        for match in matches:
            url = match.group(0)
            key = match.group(1).upper()
            title = _clean_title(line[: line.index(url)])
            result.tickets.append(
                ParsedTicket(category=category, ticket_key=key, url=url, title=title or key)
            )

    logger.info(
        "Parsed %d tickets (%d unparsed lines)", len(result.tickets), len(result.unparsed_lines)
    )
    return result


def extract_ticket_keys(message: str) -> list[str]:
    """Unique ticket keys in first-seen order."""
    return parse_ticket_list(message).unique_keys()


def group_by_category(tickets: list[ParsedTicket]) -> dict[str, list[ParsedTicket]]:
    grouped: dict[str, list[ParsedTicket]] = {}
    for ticket in tickets:
        grouped.setdefault(ticket.category, []).append(ticket)
    return grouped
