"""Score postings for ghost-job legitimacy.

Strategies are tried in order: OpenAI, Anthropic, then the deterministic
rule engine. A model strategy returns ``None`` when it has no API key, the
call fails, or the reply cannot be parsed; the rule engine always answers.
"""
from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Callable

import requests

from ghostjobs.batching import run_in_batches
from ghostjobs.config import PipelineConfig
from ghostjobs.log import get_logger
from ghostjobs.models import RECOMMENDATIONS, LegitimacyAssessment, RawPosting, Recommendation

log = get_logger(__name__)

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
MAX_PROMPT_DESCRIPTION = 2000

ANALYSIS_PROMPT = """You are an expert at identifying ghost jobs (fake or inactive job postings). Analyze this job listing and provide a legitimacy assessment.

Ghost job indicators to look for:
- Vague job descriptions with no specific responsibilities
- Unrealistic salary ranges for the role level
- Generic company descriptions
- "Urgently hiring" or pressure language
- Requests for personal/financial information
- Too-good-to-be-true benefits
- No clear reporting structure or team mentioned
- Buzzword-heavy with no substance
- Posted for months without updates

Legitimate job indicators:
- Specific technical requirements
- Clear team/department mentioned
- Realistic salary range for the market
- Company details verifiable
- Clear application process
- Posted on company's official ATS

Job Listing:
Title: <<title>>
Company: <<company>>
Location: <<location>>
Salary: <<salary>>
Description: <<description>>

Respond in JSON format:
{
  "legitimacyScore": <0-100>,
  "isLikelyGhostJob": <true/false>,
  "concerns": ["concern1", "concern2"],
  "positiveSignals": ["signal1", "signal2"],
  "recommendation": "APPROVE" | "REVIEW" | "REJECT",
  "reasoning": "Brief explanation"
}"""

# --- Rule engine weights ---
BASELINE_SCORE = 70
APPROVE_MIN = 70
REVIEW_MIN = 50

URGENCY_TERMS = ("urgently", "immediate")
TOO_GOOD_TERMS = ("guaranteed", "unlimited earning")
TEAM_TERMS = ("team", "report to", "manager")
ATS_URL_TERMS = ("greenhouse", "lever", "workday")
SHORT_DESCRIPTION = 100
DETAILED_DESCRIPTION = 500


def format_salary(posting: RawPosting) -> str:
    if not posting.salary_min:
        return "Not specified"
    high = posting.salary_max or posting.salary_min
    return f"${posting.salary_min:,} - ${high:,}"


def build_prompt(posting: RawPosting) -> str:
    values = {
        "title": posting.title,
        "company": posting.company,
        "location": posting.location,
        "salary": format_salary(posting),
        "description": posting.description[:MAX_PROMPT_DESCRIPTION],
    }
    prompt = ANALYSIS_PROMPT
    for key, value in values.items():
        prompt = prompt.replace(f"<<{key}>>", value)
    return prompt


def recommend(score: int) -> Recommendation:
    if score >= APPROVE_MIN:
        return "APPROVE"
    if score >= REVIEW_MIN:
        return "REVIEW"
    return "REJECT"


def _str_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(v).strip() for v in value if str(v).strip())


def parse_model_output(content: str, strategy: str) -> LegitimacyAssessment | None:
    """Pull the JSON object out of a model reply; ``None`` if it does not fit the schema."""
    match = re.search(r"\{.*\}", content or "", re.S)
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    raw_score = data.get("legitimacyScore")
    if isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)):
        return None
    recommendation = str(data.get("recommendation", "")).strip().upper()
    if recommendation not in RECOMMENDATIONS:
        return None

    return LegitimacyAssessment(
        score=max(0, min(100, int(round(raw_score)))),
        recommendation=recommendation,  # type: ignore[arg-type]
        concerns=_str_list(data.get("concerns")),
        positive_signals=_str_list(data.get("positiveSignals")),
        reasoning=str(data.get("reasoning", "")).strip(),
        strategy=strategy,
    )


def rule_based_assessment(posting: RawPosting) -> LegitimacyAssessment:
    concerns: list[str] = []
    signals: list[str] = []
    score = BASELINE_SCORE

    description = posting.description or ""
    text = f"{posting.title} {description}".lower()
    company = posting.company.strip()

    # --- Negative signals ---
    if any(term in text for term in URGENCY_TERMS):
        concerns.append("Urgency language detected")
        score -= 15
    if "no experience" in text and "senior" in text:
        concerns.append("Contradictory experience requirements")
        score -= 20
    if len(company) < 3 or company.lower() == "confidential":
        concerns.append("Company name not disclosed")
        score -= 15
    if len(description) < SHORT_DESCRIPTION:
        concerns.append("Very short or missing description")
        score -= 10
    if any(term in text for term in TOO_GOOD_TERMS):
        concerns.append("Too-good-to-be-true claims")
        score -= 25

    # --- Positive signals ---
    if posting.salary_min and posting.salary_max and posting.salary_max > posting.salary_min:
        signals.append("Salary range provided")
        score += 10
    if any(term in text for term in TEAM_TERMS):
        signals.append("Team structure mentioned")
        score += 5
    if any(term in posting.apply_url.lower() for term in ATS_URL_TERMS):
        signals.append("Uses legitimate ATS platform")
        score += 10
    if len(description) > DETAILED_DESCRIPTION:
        signals.append("Detailed job description")
        score += 5

    score = max(0, min(100, score))
    return LegitimacyAssessment(
        score=score,
        recommendation=recommend(score),
        concerns=tuple(concerns),
        positive_signals=tuple(signals),
        reasoning=(
            f"Rule-based analysis score: {score}/100. "
            f"{len(concerns)} concerns, {len(signals)} positive signals."
        ),
        strategy="rules",
    )


class ScoringStrategy(ABC):
    name: str = "strategy"

    @abstractmethod
    def assess(self, posting: RawPosting) -> LegitimacyAssessment | None:
        """Return an assessment, or ``None`` when this strategy is unavailable."""


class OpenAIStrategy(ScoringStrategy):
    name = "openai"

    def __init__(self, api_key: str, model: str, timeout_s: float = 30.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s

    def _complete(self, prompt: str) -> str:
        from openai import OpenAI

        client = OpenAI(api_key=self.api_key, timeout=self.timeout_s, max_retries=0)
        r = client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.3,
            max_tokens=500,
        )
        return (r.choices[0].message.content or "").strip()

    def assess(self, posting: RawPosting) -> LegitimacyAssessment | None:
        if not self.api_key:
            return None
        try:
            content = self._complete(build_prompt(posting))
        except Exception as exc:
            log.warning("OpenAI analysis failed for %r: %s", posting.title, exc)
            return None
        result = parse_model_output(content, self.name)
        if result is None:
            log.warning("OpenAI returned unparsable output for %r", posting.title)
        return result


class AnthropicStrategy(ScoringStrategy):
    name = "anthropic"

    def __init__(self, api_key: str, model: str, timeout_s: float = 30.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s

    def _complete(self, prompt: str) -> str:
        r = requests.post(
            ANTHROPIC_URL,
            headers={
                "Content-Type": "application/json",
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            json={
                "model": self.model,
                "max_tokens": 500,
                "messages": [{"role": "user", "content": prompt}],
            },
            timeout=self.timeout_s,
        )
        r.raise_for_status()
        blocks = r.json().get("content") or []
        return str(blocks[0].get("text", "")) if blocks else ""

    def assess(self, posting: RawPosting) -> LegitimacyAssessment | None:
        if not self.api_key:
            return None
        try:
            content = self._complete(build_prompt(posting))
        except (requests.RequestException, ValueError, AttributeError) as exc:
            log.warning("Anthropic analysis failed for %r: %s", posting.title, exc)
            return None
        result = parse_model_output(content, self.name)
        if result is None:
            log.warning("Anthropic returned unparsable output for %r", posting.title)
        return result


class RuleBasedStrategy(ScoringStrategy):
    name = "rules"

    def assess(self, posting: RawPosting) -> LegitimacyAssessment:
        return rule_based_assessment(posting)


class LegitimacyScorer:
    """Chain of scoring strategies ending in the rule engine."""

    def __init__(self, strategies: list[ScoringStrategy], config: PipelineConfig) -> None:
        if not strategies or not isinstance(strategies[-1], RuleBasedStrategy):
            strategies = [*strategies, RuleBasedStrategy()]
        self.strategies = strategies
        self.config = config

    @classmethod
    def from_config(cls, config: PipelineConfig) -> LegitimacyScorer:
        strategies: list[ScoringStrategy] = [
            OpenAIStrategy(config.openai_api_key, config.openai_model, config.model_timeout_s),
            AnthropicStrategy(config.anthropic_api_key, config.anthropic_model, config.model_timeout_s),
            RuleBasedStrategy(),
        ]
        configured = [s.name for s in strategies[:-1] if getattr(s, "api_key", "")]
        log.info("Legitimacy providers: %s", ", ".join(configured) or "none (rule engine only)")
        return cls(strategies, config)

    def score(self, posting: RawPosting) -> LegitimacyAssessment:
        for strategy in self.strategies[:-1]:
            try:
                result = strategy.assess(posting)
            except Exception as exc:
                log.warning("%s strategy raised for %r: %s", strategy.name, posting.title, exc)
                continue
            if result is not None:
                log.info("AI analysis (%s): %s - %s", strategy.name, posting.title, result.recommendation)
                return result
        log.debug("Rule-based analysis: %s", posting.title)
        return self.strategies[-1].assess(posting)

    def score_all(
        self,
        postings: list[RawPosting],
        on_error: Callable[[RawPosting, Exception], None] | None = None,
    ) -> dict[int, LegitimacyAssessment]:
        return run_in_batches(
            postings,
            self.score,
            batch_size=self.config.score_batch_size,
            pause_s=self.config.score_pause_s,
            on_error=on_error,
        )
