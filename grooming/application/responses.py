"""Parsing of raw oracle text into assignment / rationale mappings."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Collection

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


class OracleResponseError(ValueError):
    """Oracle text could not be turned into a usable mapping."""


class AssignmentItem(BaseModel):
    ticket_key: str
    engineer: str
    reasoning: str | None = None


class AssignmentResponse(BaseModel):
    assignments: list[AssignmentItem]


class RationaleItem(BaseModel):
    ticket_key: str
    reasoning: str


class RationaleResponse(BaseModel):
    rationales: list[RationaleItem]


def _try_load_dict(raw: str) -> dict | None:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(text: str) -> dict:
    """Find a JSON object in model output (bare, fenced, or wrapped in prose).

    Raises:
        OracleResponseError: if no JSON object can be recovered.
    """
    text = (text or "").strip()
    if not text:
        raise OracleResponseError("Empty oracle response")

    direct = _try_load_dict(text)
    if direct is not None:
        return direct

    fenced = _FENCED_JSON.search(text)
    if fenced is not None:
        payload = _try_load_dict(fenced.group(1))
        if payload is not None:
            return payload

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        payload = _try_load_dict(text[start : end + 1])
        if payload is not None:
            return payload

    raise OracleResponseError("No JSON object found in oracle response")


def parse_assignments(
    text: str,
    ticket_keys: Collection[str],
    engineer_names: Collection[str],
) -> tuple[dict[str, str], dict[str, str]]:
    """Parse an assignment reply.

    Entries for unknown tickets or engineers are dropped; when a ticket is
    listed twice the first entry is kept.

    Returns:
        (ticket_key → engineer, ticket_key → reasoning)

    Raises:
        OracleResponseError: on malformed JSON or schema mismatch.
    """
    try:
        response = AssignmentResponse.model_validate(extract_json_object(text))
    except ValidationError as e:
        raise OracleResponseError(f"Unexpected assignment shape: {e.error_count()} errors") from e

    assignments: dict[str, str] = {}
    reasoning: dict[str, str] = {}
    for item in response.assignments:
        key = item.ticket_key.strip().upper()
        engineer = item.engineer.strip()
        if key not in ticket_keys or key in assignments:
            continue
        if engineer not in engineer_names:
            logger.debug("Dropping vote for unknown engineer %r on %s", engineer, key)
            continue
        assignments[key] = engineer
        if item.reasoning:
            reasoning[key] = item.reasoning.strip()

    return assignments, reasoning


def parse_rationales(text: str, ticket_keys: Collection[str]) -> dict[str, str]:
    """Parse a rationale reply into ticket_key → reasoning.

    Raises:
        OracleResponseError: on malformed JSON or schema mismatch.
    """
    try:
        response = RationaleResponse.model_validate(extract_json_object(text))
    except ValidationError as e:
        raise OracleResponseError(f"Unexpected rationale shape: {e.error_count()} errors") from e

    return {
        item.ticket_key.strip().upper(): item.reasoning.strip()
        for item in response.rationales
        if item.ticket_key.strip().upper() in ticket_keys and item.reasoning.strip()
    }
