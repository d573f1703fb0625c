"""Tests for JiraAdapter — requests are served by an httpx.MockTransport (no network)."""

import httpx
import pytest

from grooming.adapters.jira.jira_adapter import (
    NO_DESCRIPTION,
    JiraAdapter,
    build_history_jql,
    extract_adf_text,
    to_work_record,
)

BASE_URL = "https://acme.atlassian.net"


def issue(key, summary="Some work", status="To Do", assignee=None, parent=None, **fields):
    data = {
        "summary": summary,
        "status": {"name": status},
        "assignee": {"displayName": assignee} if assignee else None,
        "issuetype": {"name": "Task"},
        "labels": fields.pop("labels", []),
        "components": [{"name": c} for c in fields.pop("components", [])],
        "description": fields.pop("description", None),
    }
    if parent:
        data["parent"] = {"key": parent, "fields": {}}
    return {"key": key, "fields": data}


class FakeJira:
    """Minimal Jira REST v3 stand-in keyed by issue key."""

    def __init__(self, issues, pages=None):
        self.issues = {i["key"]: i for i in issues}
        self.pages = pages or []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/rest/api/3/issue/"):
            key = path.rsplit("/", 1)[-1]
            if key not in self.issues:
                return httpx.Response(404, json={"errorMessages": ["Issue does not exist"]})
            return httpx.Response(200, json=self.issues[key])
        if path == "/rest/api/3/search/jql":
            token = request.url.params.get("nextPageToken")
            index = int(token) if token else 0
            page = dict(self.pages[index])
            if index + 1 < len(self.pages):
                page["nextPageToken"] = str(index + 1)
            else:
                page["isLast"] = True
            return httpx.Response(200, json=page)
        return httpx.Response(404)


def make_adapter(fake: FakeJira, max_results: int = 1000) -> JiraAdapter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return JiraAdapter(
        base_url=BASE_URL + "/",
        username="bot@acme.io",
        token="secret",
        max_results=max_results,
        client=client,
    )


# ─── Mapping helpers ─────────────────────────────────────────────────


def test_extract_adf_text_flattens_paragraphs():
    adf = {
        "type": "doc",
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": "First line"}]},
            {"type": "paragraph", "content": [
                {"type": "text", "text": "Second "},
                {"type": "text", "text": "line"},
            ]},
        ],
    }
    assert extract_adf_text(adf) == "First line\nSecond line"


def test_extract_adf_text_missing_description():
    assert extract_adf_text(None) == NO_DESCRIPTION
    assert extract_adf_text({"type": "doc", "content": []}) == NO_DESCRIPTION
    assert extract_adf_text("  plain  ") == "plain"


def test_to_work_record_maps_fields():
    record = to_work_record(
        issue("PY-1", summary="Billing", status="In Progress", assignee="Alice",
              parent="EPIC-1", labels=["backend"], components=["Billing"])
    )
    assert record.ticket_id == "PY-1"
    assert record.status == "In Progress"
    assert record.assignee == "Alice"
    assert record.parent == "EPIC-1"
    assert record.labels == ("backend",)
    assert record.components == ("Billing",)
    assert record.issue_type == "Task"


def test_to_work_record_unassigned():
    assert to_work_record(issue("PY-2")).assignee == "Unassigned"


def test_build_history_jql():
    assert build_history_jql(["a@x.io", "b@x.io"], 90) == (
        'assignee IN ("a@x.io", "b@x.io") AND updated >= -90d ORDER BY updated DESC'
    )
    assert build_history_jql(None, None) == "assignee IS NOT EMPTY ORDER BY updated DESC"


# ─── fetch_by_keys ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fetch_by_keys_splits_found_and_not_found():
    fake = FakeJira([issue("PY-1"), issue("PY-3")])
    lookup = await make_adapter(fake).fetch_by_keys(["PY-1", "PY-2", "PY-3"])

    assert [r.ticket_id for r in lookup.found] == ["PY-1", "PY-3"]
    assert lookup.not_found == ["PY-2"]


@pytest.mark.asyncio
async def test_fetch_by_keys_sends_basic_auth():
    fake = FakeJira([issue("PY-1")])
    await make_adapter(fake).fetch_by_keys(["PY-1"])

    request = fake.requests[0]
    assert request.headers["Authorization"].startswith("Basic ")
    assert str(request.url).startswith(f"{BASE_URL}/rest/api/3/issue/PY-1")


@pytest.mark.asyncio
async def test_fetch_by_keys_handles_more_than_one_batch():
    keys = [f"PY-{n}" for n in range(1, 24)]
    fake = FakeJira([issue(k) for k in keys])
    lookup = await make_adapter(fake).fetch_by_keys(keys)

    assert [r.ticket_id for r in lookup.found] == keys
    assert len(fake.requests) == 23


# ─── fetch_engineer_history ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_history_follows_pages_and_groups_by_assignee():
    pages = [
        {"issues": [issue("PY-1", assignee="Alice"), issue("PY-2", assignee="Bob")]},
        {"issues": [issue("PY-3", assignee="Alice")]},
    ]
    fake = FakeJira([], pages=pages)
    history = await make_adapter(fake).fetch_engineer_history(["a@x.io"], 30)

    assert list(history) == ["Alice", "Bob"]
    assert [r.ticket_id for r in history["Alice"]] == ["PY-1", "PY-3"]
    assert 'updated >= -30d' in fake.requests[0].url.params["jql"]


@pytest.mark.asyncio
async def test_history_respects_max_results():
    pages = [
        {"issues": [issue("PY-1", assignee="Alice"), issue("PY-2", assignee="Alice")]},
        {"issues": [issue("PY-3", assignee="Alice")]},
    ]
    fake = FakeJira([], pages=pages)
    history = await make_adapter(fake, max_results=2).fetch_engineer_history()

    assert [r.ticket_id for r in history["Alice"]] == ["PY-1", "PY-2"]
    assert len(fake.requests) == 1


@pytest.mark.asyncio
async def test_history_resolves_parent_summaries_once_per_epic():
    pages = [{"issues": [
        issue("PY-1", assignee="Alice", parent="EPIC-1"),
        issue("PY-2", assignee="Alice", parent="EPIC-1"),
        issue("PY-3", assignee="Bob", parent="EPIC-9"),
    ]}]
    fake = FakeJira([issue("EPIC-1", summary="Billing revamp")], pages=pages)
    history = await make_adapter(fake).fetch_engineer_history()

    assert [r.parent_summary for r in history["Alice"]] == ["Billing revamp", "Billing revamp"]
    assert history["Bob"][0].parent_summary is None
    parent_requests = [r for r in fake.requests if "/issue/" in r.url.path]
    assert sorted(r.url.path for r in parent_requests) == [
        "/rest/api/3/issue/EPIC-1",
        "/rest/api/3/issue/EPIC-9",
    ]


@pytest.mark.asyncio
async def test_moved_issue_is_filed_under_requested_key():
    fake = FakeJira([])
    fake.issues["PY-101"] = issue("NEW-5", summary="Moved ticket")
    lookup = await make_adapter(fake).fetch_by_keys(["PY-101"])

    assert [r.ticket_id for r in lookup.found] == ["PY-101"]
    assert lookup.found[0].summary == "Moved ticket"
    assert lookup.not_found == []


@pytest.mark.asyncio
async def test_non_json_issue_body_counts_as_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/PY-2"):
            return httpx.Response(200, text="<html>maintenance</html>")
        return httpx.Response(200, json=issue("PY-1"))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    adapter = JiraAdapter(base_url=BASE_URL, username="u", token="t", client=client)
    lookup = await adapter.fetch_by_keys(["PY-1", "PY-2"])

    assert [r.ticket_id for r in lookup.found] == ["PY-1"]
    assert lookup.not_found == ["PY-2"]


def test_history_jql_escapes_quotes():
    jql = build_history_jql(['a"b@x.io'], None)
    assert jql == 'assignee IN ("a\\"b@x.io") ORDER BY updated DESC'
