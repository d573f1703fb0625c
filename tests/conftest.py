"""Pytest configuration and shared fixtures."""

import pytest

from grooming.domain.entities.engineer_profile import EngineerProfile
from grooming.domain.entities.grooming_ticket import GroomingTicket
from grooming.domain.entities.work_record import WorkRecord


@pytest.fixture
def sample_ticket_list():
    return (
        "Meetings:\n"
        'Add a "Add Meeting" button - https://acme.atlassian.net/browse/PY-101\n'
        "PostHog:\n"
        "(Logan) Remove delighted survey - https://acme.atlassian.net/browse/PY-102\n"
    )


@pytest.fixture
def alice_history():
    return [
        WorkRecord(ticket_id="PY-1", summary="Billing API", status="In Progress",
                   assignee="Alice", components=("Billing",), parent="EPIC-1"),
        WorkRecord(ticket_id="PY-2", summary="Invoice PDFs", status="Done",
                   assignee="Alice", components=("Billing",), parent="EPIC-1"),
    ]


@pytest.fixture
def bob_history():
    return [
        WorkRecord(ticket_id="PY-3", summary="Meeting notes", status="In Review",
                   assignee="Bob", components=("Meetings",), labels=("ai",)),
    ]


@pytest.fixture
def profiles(alice_history, bob_history):
    return [
        EngineerProfile(name="Alice", recent_tickets=tuple(alice_history), current_workload=1),
        EngineerProfile(name="Bob", recent_tickets=tuple(bob_history), current_workload=1),
    ]


@pytest.fixture
def tickets():
    return [
        GroomingTicket(ticket_key="PY-101", category="Meetings", summary="Add meeting button"),
        GroomingTicket(ticket_key="PY-102", category="Billing", summary="Refund flow",
                       parent="EPIC-1", parent_summary="Billing revamp"),
    ]
