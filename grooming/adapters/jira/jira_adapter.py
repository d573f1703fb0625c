"""Jira adapter — implements TicketSource and WorkHistorySource over REST API v3."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from grooming.application.ports.ticket_source import TicketLookup, TicketSource
from grooming.application.ports.work_history_source import WorkHistorySource
from grooming.config import settings
from grooming.domain.entities.work_record import WorkRecord
from grooming.domain.value_objects.profile_rules import UNASSIGNED

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "assignee,status,created,summary,description,issuetype,parent,labels,components"
BATCH_SIZE = 10
PAGE_SIZE = 100
NO_DESCRIPTION = "No description"

# ADF node types that end a line of text
_BLOCK_NODES = {"paragraph", "heading", "listItem", "codeBlock", "blockquote", "rule", "hardBreak"}


def extract_adf_text(description) -> str:
    """Flatten an Atlassian Document Format description to plain text."""
    if description is None:
        return NO_DESCRIPTION
    if isinstance(description, str):
        return description.strip() or NO_DESCRIPTION

    parts: list[str] = []

    def walk(node: dict) -> None:
        if node.get("type") == "text":
            parts.append(node.get("text", ""))
        for child in node.get("content") or []:
            if isinstance(child, dict):
                walk(child)
        if node.get("type") in _BLOCK_NODES:
            parts.append("\n")

    walk(description)
    text = re.sub(r"\n{2,}", "\n", "".join(parts)).strip()
    return text or NO_DESCRIPTION


def to_work_record(issue: dict) -> WorkRecord:
    """Map a raw Jira issue payload to a WorkRecord."""
    fields = issue.get("fields") or {}
    assignee = fields.get("assignee") or {}
    parent = fields.get("parent") or {}
    parent_fields = parent.get("fields") or {}

    return WorkRecord(
        ticket_id=issue["key"],
        summary=fields.get("summary") or "",
        status=(fields.get("status") or {}).get("name", ""),
        assignee=assignee.get("displayName") or UNASSIGNED,
        issue_type=(fields.get("issuetype") or {}).get("name"),
        description=extract_adf_text(fields.get("description")),
        labels=tuple(fields.get("labels") or ()),
        components=tuple(c["name"] for c in fields.get("components") or () if c.get("name")),
        parent=parent.get("key"),
        parent_summary=parent_fields.get("summary"),
    )


def _escape_jql(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_history_jql(assignees: list[str] | None, lookback_days: int | None) -> str:
    clauses = []
    if assignees:
        quoted = ", ".join(f'"{_escape_jql(a)}"' for a in assignees)
        clauses.append(f"assignee IN ({quoted})")
    else:
        clauses.append("assignee IS NOT EMPTY")
    if lookback_days:
        clauses.append(f"updated >= -{lookback_days}d")
    return " AND ".join(clauses) + " ORDER BY updated DESC"


class JiraAdapter(TicketSource, WorkHistorySource):
    """Jira Cloud client with basic auth (username + API token)."""

    def __init__(
        self,
        base_url: str | None = None,
        username: str | None = None,
        token: str | None = None,
        max_results: int | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = (base_url or settings.jira_url).rstrip("/")
        self._auth = httpx.BasicAuth(username or settings.jira_username, token or settings.jira_token)
        self._max_results = max_results or settings.jira_max_results
        self._timeout = timeout
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    async def _get(self, client: httpx.AsyncClient, path: str, params: dict) -> dict:
        response = await client.get(
            f"{self._base_url}{path}",
            params=params,
            auth=self._auth,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        return response.json()

    async def _fetch_issue(
        self, client: httpx.AsyncClient, key: str, fields: str = ISSUE_FIELDS
    ) -> dict | None:
        try:
            return await self._get(client, f"/rest/api/3/issue/{key}", {"fields": fields})
        except httpx.HTTPStatusError as e:
            logger.info("Issue %s not available (HTTP %d)", key, e.response.status_code)
        except httpx.RequestError as e:
            logger.warning("Failed to fetch issue %s: %s", key, e)
        except ValueError as e:
            logger.warning("Issue %s returned a malformed body: %s", key, e)
        return None

    async def _fetch_many(
        self, client: httpx.AsyncClient, keys: list[str], fields: str = ISSUE_FIELDS
    ) -> dict[str, dict | None]:
        """Fetch issues concurrently, BATCH_SIZE at a time."""
        results: dict[str, dict | None] = {}
        for start in range(0, len(keys), BATCH_SIZE):
            batch = keys[start : start + BATCH_SIZE]
            issues = await asyncio.gather(*(self._fetch_issue(client, k, fields) for k in batch))
            results.update(zip(batch, issues))
        return results

    async def fetch_by_keys(self, keys: list[str]) -> TicketLookup:
        lookup = TicketLookup()
        async with self._session() as client:
            issues = await self._fetch_many(client, keys)

        for key in keys:
            issue = issues.get(key)
            if issue is None:
                lookup.not_found.append(key)
            else:
                record = to_work_record(issue)
                if record.ticket_id != key:
                    # moved issues answer under their new key
                    logger.info("Issue %s now lives at %s", key, record.ticket_id)
                    record = dataclasses.replace(record, ticket_id=key)
                lookup.found.append(record)

        logger.info("Resolved %d/%d tickets", len(lookup.found), len(keys))
        return lookup

    async def search(self, client: httpx.AsyncClient, jql: str) -> list[dict]:
        """Run a JQL search following ``nextPageToken`` until max_results."""
        issues: list[dict] = []
        token: str | None = None

        while len(issues) < self._max_results:
            params = {
                "jql": jql,
                "fields": ISSUE_FIELDS,
                "maxResults": min(PAGE_SIZE, self._max_results - len(issues)),
            }
            if token:
                params["nextPageToken"] = token
            data = await self._get(client, "/rest/api/3/search/jql", params)
            issues.extend(data.get("issues") or [])
            token = data.get("nextPageToken")
            if not token or data.get("isLast", False):
                break

        return issues[: self._max_results]

    async def fetch_engineer_history(
        self,
        assignees: list[str] | None = None,
        lookback_days: int | None = None,
    ) -> dict[str, list[WorkRecord]]:
        jql = build_history_jql(assignees, lookback_days)
        logger.info("Fetching engineer history: %s", jql)

        async with self._session() as client:
            raw = await self.search(client, jql)
            records = [to_work_record(issue) for issue in raw]
            records = await self._resolve_parent_summaries(client, records)

        history: dict[str, list[WorkRecord]] = {}
        for record in records:
            history.setdefault(record.assignee, []).append(record)

        logger.info("Fetched %d historical tickets for %d assignees", len(records), len(history))
        return history

    async def _resolve_parent_summaries(
        self, client: httpx.AsyncClient, records: list[WorkRecord]
    ) -> list[WorkRecord]:
        missing = list(dict.fromkeys(r.parent for r in records if r.parent and not r.parent_summary))
        if not missing:
            return records

        parents = await self._fetch_many(client, missing, fields="summary")
        summaries = {
            key: issue["fields"]["summary"]
            for key, issue in parents.items()
            if issue and (issue.get("fields") or {}).get("summary")
        }

        return [
            dataclasses.replace(r, parent_summary=summaries[r.parent])
            if r.parent and not r.parent_summary and r.parent in summaries
            else r
            for r in records
        ]
