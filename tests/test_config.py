from __future__ import annotations

from pathlib import Path

import pytest

from ghostjobs.config import PROJECT_ROOT, PipelineConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("OPENAI_API_KEY", "OPENAI_MODEL", "ANTHROPIC_API_KEY", "ANTHROPIC_MODEL", "GHOSTJOBS_STORE_PATH"):
        monkeypatch.delenv(key, raising=False)


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")

    assert config == PipelineConfig()
    assert config.verify_batch_size == 5
    assert config.reverify_after_hours == 24.0


def test_yaml_overrides_are_coerced(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        "greenhouse_companies: [Stripe, ' figma ']\n"
        "lever_companies: []\n"
        "verify_pause_s: 0\n"
        "queue_borderline_for_review: 'yes'\n"
        "store_path: var/jobs.csv\n"
        "not_a_setting: 1\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.greenhouse_companies == ("stripe", "figma")
    assert config.lever_companies == ()
    assert config.verify_pause_s == 0.0
    assert config.queue_borderline_for_review is True
    assert config.store_path == PROJECT_ROOT / "var" / "jobs.csv"


def test_environment_supplies_secrets_and_models(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", " sk-test ")
    monkeypatch.setenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-latest")
    monkeypatch.setenv("GHOSTJOBS_STORE_PATH", str(tmp_path / "jobs.csv"))

    config = load_config(tmp_path / "absent.yaml")

    assert config.openai_api_key == "sk-test"
    assert config.anthropic_model == "claude-3-5-sonnet-latest"
    assert config.openai_model == "gpt-4o-mini"
    assert config.store_path == tmp_path / "jobs.csv"


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_shipped_config_matches_defaults():
    config = load_config(Path(PROJECT_ROOT / "config" / "pipeline.yaml"))
    assert config.greenhouse_companies == PipelineConfig().greenhouse_companies
    assert config.trusted_domains == PipelineConfig().trusted_domains
    assert config.store_path == PipelineConfig().store_path
