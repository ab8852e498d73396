"""Load pipeline settings from config/pipeline.yaml and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ghostjobs.log import get_logger

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
CONFIG_PATH: Path = CONFIG_DIR / "pipeline.yaml"
DATA_DIR: Path = PROJECT_ROOT / "data"
REPORTS_DIR: Path = PROJECT_ROOT / "reports"

GREENHOUSE_COMPANIES: tuple[str, ...] = (
    "stripe", "mongodb", "figma", "notion", "discord", "plaid", "ramp", "brex",
    "gusto", "airtable", "webflow", "vercel", "supabase", "linear", "loom",
    "miro", "asana", "dropbox", "twitch", "reddit", "coinbase", "robinhood",
    "doordash", "instacart", "lyft", "uber", "airbnb", "snapchat", "pinterest",
    "spotify", "netflix", "databricks", "snowflake", "datadog", "cloudflare",
    "elastic", "gitlab", "hashicorp", "confluent", "okta",
)

LEVER_COMPANIES: tuple[str, ...] = (
    "openai", "anthropic", "scale", "anyscale", "huggingface", "stability",
    "replit", "sourcegraph", "retool", "deel", "remote", "oysterhr", "lattice",
    "rippling", "zapier", "calendly", "canva", "grammarly", "duolingo", "quizlet",
)

# Applicant tracking systems whose hosts are trusted without a root-domain probe.
TRUSTED_DOMAINS: tuple[str, ...] = (
    "greenhouse.io", "lever.co", "ashbyhq.com", "workday.com",
    "smartrecruiters.com", "jobvite.com", "icims.com", "taleo.net",
    "myworkdayjobs.com", "careers-page.com", "breezy.hr", "recruitee.com",
    "bamboohr.com", "workable.com", "jazz.co", "applytojob.com",
)


@dataclass(frozen=True)
class PipelineConfig:
    greenhouse_companies: tuple[str, ...] = GREENHOUSE_COMPANIES
    lever_companies: tuple[str, ...] = LEVER_COMPANIES
    trusted_domains: tuple[str, ...] = TRUSTED_DOMAINS

    source_user_agent: str = "GhostJobHunter/1.0"
    link_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    source_timeout_s: float = 15.0
    link_timeout_s: float = 10.0
    model_timeout_s: float = 30.0
    # per-host connections; at least the widest fan-out (roster or verify batch)
    http_pool_size: int = 16

    roster_batch_size: int = 5
    roster_pause_s: float = 0.5
    page_pause_s: float = 0.3
    himalayas_page_size: int = 20
    himalayas_max_pages: int = 25

    verify_batch_size: int = 5
    verify_pause_s: float = 1.0
    score_batch_size: int = 3
    score_pause_s: float = 0.5

    review_accept_min_score: int = 60
    queue_borderline_for_review: bool = False
    reverify_after_hours: float = 24.0
    reverify_pause_s: float = 0.5
    listing_window_hours: float = 48.0
    max_errors: int = 50

    store_path: Path = DATA_DIR / "jobs.csv"
    reports_dir: Path = REPORTS_DIR

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-haiku-20240307"


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        log.debug("No config file at %s, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _coerce(value: Any, default: Any) -> Any:
    if isinstance(default, tuple):
        if isinstance(value, str):
            value = [value]
        return tuple(str(v).strip().lower() for v in value if str(v).strip())
    if isinstance(default, Path):
        path = Path(value).expanduser()
        return path if path.is_absolute() else PROJECT_ROOT / path
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def load_config(path: Path | None = None) -> PipelineConfig:
    """Build a ``PipelineConfig`` from YAML overrides and environment variables.

    Unknown YAML keys are ignored with a warning so an old config file never
    blocks a scheduled run.
    """
    path = path or Path(get_env("GHOSTJOBS_CONFIG") or CONFIG_PATH)
    data = _read_yaml(path)

    known = {f.name: f.default for f in fields(PipelineConfig)}
    values: dict[str, Any] = {}
    for key, raw in data.items():
        if key not in known:
            log.warning("Ignoring unknown config key %r in %s", key, path.name)
            continue
        if raw is None:
            continue
        values[key] = _coerce(raw, known[key])

    store_path = get_env("GHOSTJOBS_STORE_PATH")
    if store_path:
        values["store_path"] = _coerce(store_path, known["store_path"])

    values["openai_api_key"] = get_env("OPENAI_API_KEY")
    values["anthropic_api_key"] = get_env("ANTHROPIC_API_KEY")
    if get_env("OPENAI_MODEL"):
        values["openai_model"] = get_env("OPENAI_MODEL")
    if get_env("ANTHROPIC_MODEL"):
        values["anthropic_model"] = get_env("ANTHROPIC_MODEL")

    return PipelineConfig(**values)


@lru_cache
def get_config() -> PipelineConfig:
    """Process-wide configuration, loaded once."""
    config = load_config()
    log.debug(
        "Loaded config: %d Greenhouse boards, %d Lever boards, %d trusted domains",
        len(config.greenhouse_companies), len(config.lever_companies), len(config.trusted_domains),
    )
    return config


def ensure_dirs(config: PipelineConfig) -> None:
    for d in (config.store_path.parent, config.reports_dir):
        d.mkdir(parents=True, exist_ok=True)
