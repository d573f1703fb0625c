"""Tests for BuildConsensusUseCase and rationale enrichment."""

from __future__ import annotations

import json

import pytest

from grooming.application.ports.oracle_port import OracleError, RecommendationOracle
from grooming.application.prompts import TrialPayload
from grooming.application.use_cases.build_consensus import BuildConsensusUseCase
from grooming.domain.entities.recommendation import UNABLE_TO_DETERMINE
from grooming.domain.entities.trial_result import TrialResult


class FakeOracle(RecommendationOracle):
    def __init__(self, response: str | Exception):
        self._response = response
        self.calls: list[str] = []

    async def complete(self, prompt, temperature):
        self.calls.append(prompt)
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def _rationales(**by_key: str) -> str:
    return json.dumps({"rationales": [{"ticket_key": k.replace("_", "-"), "reasoning": v}
                                      for k, v in by_key.items()]})


@pytest.fixture
def payload(tickets, profiles):
    return TrialPayload(tickets=tuple(tickets), profiles=tuple(profiles))


@pytest.fixture
def trials():
    return [
        TrialResult(trial_index=0, assignments={"PY-101": "Bob", "PY-102": "Alice"}),
        TrialResult(trial_index=1, assignments={"PY-101": "Bob", "PY-102": "Alice"}),
        TrialResult(trial_index=2, assignments={"PY-101": "Alice"}),
    ]


@pytest.mark.asyncio
async def test_non_verbose_makes_no_oracle_call(payload, trials):
    oracle = FakeOracle(_rationales(PY_101="x"))
    recs = await BuildConsensusUseCase(oracle).execute(payload, trials, verbose=False)

    assert oracle.calls == []
    assert [(r.recommended_engineer, r.confidence) for r in recs] == [("Bob", "2/3"), ("Alice", "2/3")]
    assert all(r.reasoning is None for r in recs)


@pytest.mark.asyncio
async def test_verbose_attaches_rationale(payload, trials):
    oracle = FakeOracle(_rationales(PY_101="Meetings specialist", PY_102="Worked on EPIC-1"))
    recs = await BuildConsensusUseCase(oracle).execute(payload, trials, verbose=True)

    assert len(oracle.calls) == 1
    assert recs[0].reasoning == "Meetings specialist"
    assert recs[1].reasoning == "Worked on EPIC-1"
    assert recs[0].recommended_engineer == "Bob"
    assert recs[0].confidence == "2/3"


@pytest.mark.asyncio
async def test_rationale_failure_keeps_winners(payload, trials):
    oracle = FakeOracle(OracleError("down"))
    recs = await BuildConsensusUseCase(oracle).execute(payload, trials, verbose=True)

    assert len(oracle.calls) == 1
    assert [(r.recommended_engineer, r.confidence) for r in recs] == [("Bob", "2/3"), ("Alice", "2/3")]
    assert all(r.reasoning is None for r in recs)


@pytest.mark.asyncio
async def test_malformed_rationale_keeps_winners(payload, trials):
    recs = await BuildConsensusUseCase(FakeOracle("nope")).execute(payload, trials, verbose=True)
    assert [r.recommended_engineer for r in recs] == ["Bob", "Alice"]
    assert all(r.reasoning is None for r in recs)


@pytest.mark.asyncio
async def test_rationale_is_not_attached_to_sentinel(payload):
    trials = [TrialResult(trial_index=0, assignments={"PY-101": "Bob"})]
    oracle = FakeOracle(_rationales(PY_101="ok", PY_102="should be ignored"))
    recs = await BuildConsensusUseCase(oracle).execute(payload, trials, verbose=True)

    assert recs[1].recommended_engineer == UNABLE_TO_DETERMINE
    assert recs[1].reasoning is None
    assert recs[0].reasoning == "ok"


@pytest.mark.asyncio
async def test_rationale_skipped_when_nothing_decided(payload):
    oracle = FakeOracle(_rationales(PY_101="x"))
    recs = await BuildConsensusUseCase(oracle).execute(payload, [], verbose=True)
    assert oracle.calls == []
    assert all(r.recommended_engineer == UNABLE_TO_DETERMINE for r in recs)
