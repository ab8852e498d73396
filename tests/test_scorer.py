from __future__ import annotations

import json

import pytest
import requests

from ghostjobs.models import LegitimacyAssessment
from ghostjobs.scorer import (
    AnthropicStrategy,
    LegitimacyScorer,
    OpenAIStrategy,
    RuleBasedStrategy,
    ScoringStrategy,
    build_prompt,
    parse_model_output,
    recommend,
    rule_based_assessment,
)

from conftest import FakeResponse, make_posting

MODEL_REPLY = json.dumps({
    "legitimacyScore": 82,
    "isLikelyGhostJob": False,
    "concerns": [],
    "positiveSignals": ["Specific stack"],
    "recommendation": "APPROVE",
    "reasoning": "Looks real",
})


class Unavailable(ScoringStrategy):
    name = "unavailable"

    def assess(self, posting):
        return None


class Exploding(ScoringStrategy):
    name = "exploding"

    def assess(self, posting):
        raise RuntimeError("provider down")


class Fixed(ScoringStrategy):
    name = "fixed"

    def __init__(self, score):
        self.score = score

    def assess(self, posting):
        return LegitimacyAssessment(score=self.score, recommendation=recommend(self.score), strategy=self.name)


def test_rules_score_clean_ats_posting():
    result = rule_based_assessment(make_posting())

    # 70 + salary range 10 + ATS 10 + detailed description 5
    assert result.score == 95
    assert result.recommendation == "APPROVE"
    assert not result.ghost_job_likely
    assert result.concerns == ()
    assert result.strategy == "rules"


def test_rules_penalise_pressure_and_vague_company():
    posting = make_posting(
        title="Urgently hiring",
        company="Co",
        description="guaranteed pay",
        apply_url="https://example.com/job",
        salary_min=None,
        salary_max=None,
    )

    result = rule_based_assessment(posting)

    # 70 - 15 urgency - 15 company - 10 short - 25 too good
    assert result.score == 5
    assert result.recommendation == "REJECT"
    assert result.ghost_job_likely


def test_rules_clamp_at_zero():
    posting = make_posting(
        title="Senior engineer, urgently needed",
        company="Co",
        description="no experience required, guaranteed",
        apply_url="https://example.com/job",
        salary_min=None,
        salary_max=None,
    )
    assert rule_based_assessment(posting).score == 0


@pytest.mark.parametrize("score, expected", [(100, "APPROVE"), (70, "APPROVE"), (69, "REVIEW"), (50, "REVIEW"), (49, "REJECT")])
def test_recommend_thresholds(score, expected):
    assert recommend(score) == expected


def test_parse_model_output_normalises_reply():
    reply = 'Sure:\n{"legitimacyScore": 140, "recommendation": "approve", "concerns": ["a", " "], "reasoning": "ok"}'

    result = parse_model_output(reply, "openai")

    assert result.score == 100
    assert result.recommendation == "APPROVE"
    assert result.concerns == ("a",)
    assert result.positive_signals == ()
    assert result.strategy == "openai"


@pytest.mark.parametrize(
    "reply",
    [
        "no json here",
        '{"legitimacyScore": "high", "recommendation": "APPROVE"}',
        '{"legitimacyScore": 80, "recommendation": "MAYBE"}',
        '{"legitimacyScore": 80, "recommendation": "APPROVE",}',
    ],
)
def test_parse_model_output_rejects_bad_replies(reply):
    assert parse_model_output(reply, "openai") is None


def test_prompt_truncates_description():
    prompt = build_prompt(make_posting(description="x" * 5000))
    assert "x" * 2000 in prompt
    assert "x" * 2001 not in prompt
    assert "Salary: $70,000 - $90,000" in prompt


def test_model_strategies_without_key_are_unavailable():
    assert OpenAIStrategy("", "gpt-4o-mini").assess(make_posting()) is None
    assert AnthropicStrategy("", "claude-3-haiku-20240307").assess(make_posting()) is None


def test_openai_strategy_parses_completion(monkeypatch):
    strategy = OpenAIStrategy("sk-test", "gpt-4o-mini")
    monkeypatch.setattr(strategy, "_complete", lambda prompt: MODEL_REPLY)

    result = strategy.assess(make_posting())

    assert result.score == 82
    assert result.strategy == "openai"


def test_anthropic_strategy_calls_messages_api(monkeypatch):
    captured = {}

    def fake_post(url, headers, json, timeout):
        captured.update(url=url, headers=headers, body=json)
        return FakeResponse(200, {"content": [{"type": "text", "text": MODEL_REPLY}]})

    monkeypatch.setattr("ghostjobs.scorer.requests.post", fake_post)

    result = AnthropicStrategy("key", "claude-3-haiku-20240307").assess(make_posting())

    assert result.strategy == "anthropic"
    assert result.recommendation == "APPROVE"
    assert captured["headers"]["x-api-key"] == "key"
    assert captured["body"]["model"] == "claude-3-haiku-20240307"


def test_anthropic_strategy_network_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr("ghostjobs.scorer.requests.post", fake_post)

    assert AnthropicStrategy("key", "m").assess(make_posting()) is None


def test_scorer_falls_through_to_first_answer(config):
    scorer = LegitimacyScorer([Unavailable(), Exploding(), Fixed(61)], config)

    result = scorer.score(make_posting())

    assert result.strategy == "fixed"
    assert result.score == 61


def test_scorer_always_ends_with_rule_engine(config):
    scorer = LegitimacyScorer([Unavailable(), Exploding()], config)

    assert isinstance(scorer.strategies[-1], RuleBasedStrategy)
    assert scorer.score(make_posting()).strategy == "rules"


def test_score_all_keys_results_by_position(config):
    scorer = LegitimacyScorer([], config)
    postings = [make_posting(title=f"Role {i}") for i in range(7)]

    results = scorer.score_all(postings)

    assert sorted(results) == list(range(7))
    assert all(r.strategy == "rules" for r in results.values())


def test_from_config_without_keys_uses_rules(config):
    scorer = LegitimacyScorer.from_config(config)
    assert [s.name for s in scorer.strategies] == ["openai", "anthropic", "rules"]
    assert scorer.score(make_posting()).strategy == "rules"
