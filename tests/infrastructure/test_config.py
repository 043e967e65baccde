"""Tests for configuration module."""

import json
import os
import pytest
from unittest.mock import patch

from kubepromote.infrastructure.config import (
    GitOpsConfig,
    HistoryConfig,
    KubernetesConfig,
    NotificationsConfig,
    ObserverConfig,
    PipelineConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env():
    env = {k: v for k, v in os.environ.items() if not k.startswith("KUBEPROMOTE_")}
    with patch.dict(os.environ, env, clear=True):
        yield


class TestDefaultConfig:
    def test_defaults(self):
        config = load_config(path="/nonexistent/kubepromote.json")
        assert config.log_level == "WARNING"
        assert config.kubernetes.label_key == "app.kubernetes.io/name"
        assert config.gitops.path_template == "clusters/kbot/{namespace}/image-policy.yaml"
        assert config.gitops.prod_branch == "prod"
        assert config.history.db_path == "data/history.db"
        assert config.observer.max_attempts == 3
        assert config.observer.retry_delay_seconds == 30
        assert config.pipeline.stages == ("dev", "qa", "stage", "prod")

    def test_all_sections_present(self):
        config = load_config(path="/nonexistent/kubepromote.json")
        assert isinstance(config.kubernetes, KubernetesConfig)
        assert isinstance(config.gitops, GitOpsConfig)
        assert isinstance(config.history, HistoryConfig)
        assert isinstance(config.observer, ObserverConfig)
        assert isinstance(config.pipeline, PipelineConfig)
        assert isinstance(config.notifications, NotificationsConfig)

    def test_default_chain(self):
        chain = load_config(path="/nonexistent/kubepromote.json").pipeline.chain()
        assert chain.promotable == ("qa", "stage", "prod")


class TestFileConfig:
    def test_load_from_file(self, tmp_path):
        config_file = tmp_path / "kubepromote.json"
        config_file.write_text(json.dumps({
            "log_level": "DEBUG",
            "gitops": {"owner": "acme", "repo": "flux"},
            "pipeline": {"stages": ["dev", "staging", "live"]},
            "observer": {"max_attempts": 5},
        }))

        config = load_config(path=str(config_file))
        assert config.log_level == "DEBUG"
        assert config.gitops.owner == "acme"
        assert config.gitops.repo == "flux"
        assert config.pipeline.stages == ("dev", "staging", "live")
        assert config.pipeline.chain().source_of("live") == "staging"
        assert config.observer.max_attempts == 5

    def test_partial_config(self, tmp_path):
        config_file = tmp_path / "kubepromote.json"
        config_file.write_text(json.dumps({"history": {"db_path": "/var/lib/kp.db"}}))

        config = load_config(path=str(config_file))
        assert config.history.db_path == "/var/lib/kp.db"
        assert config.gitops.default_branch == "main"  # default preserved

    def test_invalid_json_returns_defaults(self, tmp_path):
        config_file = tmp_path / "kubepromote.json"
        config_file.write_text("not valid json{{{")

        config = load_config(path=str(config_file))
        assert config.observer.max_attempts == 3  # defaults

    def test_unknown_keys_ignored(self, tmp_path):
        config_file = tmp_path / "kubepromote.json"
        config_file.write_text(json.dumps({
            "gitops": {"owner": "acme", "unknown_key": "ignored"},
        }))

        config = load_config(path=str(config_file))
        assert config.gitops.owner == "acme"


class TestEnvOverride:
    def test_env_overrides_file(self, tmp_path):
        config_file = tmp_path / "kubepromote.json"
        config_file.write_text(json.dumps({"gitops": {"owner": "acme"}}))

        with patch.dict(os.environ, {"KUBEPROMOTE_GITOPS_OWNER": "globex"}):
            config = load_config(path=str(config_file))

        assert config.gitops.owner == "globex"

    def test_env_int_conversion(self):
        with patch.dict(os.environ, {"KUBEPROMOTE_OBSERVER_MAX_ATTEMPTS": "7"}):
            config = load_config(path="/nonexistent/kubepromote.json")
        assert config.observer.max_attempts == 7

    def test_env_float_conversion(self):
        with patch.dict(os.environ, {"KUBEPROMOTE_OBSERVER_RETRY_DELAY_SECONDS": "0.5"}):
            config = load_config(path="/nonexistent/kubepromote.json")
        assert config.observer.retry_delay_seconds == 0.5

    def test_env_tuple_conversion(self):
        with patch.dict(os.environ, {"KUBEPROMOTE_PIPELINE_STAGES": "dev, qa ,prod"}):
            config = load_config(path="/nonexistent/kubepromote.json")
        assert config.pipeline.stages == ("dev", "qa", "prod")

    def test_env_multiword_field(self):
        with patch.dict(os.environ, {
            "KUBEPROMOTE_NOTIFICATIONS_SLACK_WEBHOOK_URL": "https://hooks.example/T0",
            "KUBEPROMOTE_GITOPS_TOKEN": "ghp_test",
        }):
            config = load_config(path="/nonexistent/kubepromote.json")
        assert config.notifications.slack_webhook_url == "https://hooks.example/T0"
        assert config.gitops.token == "ghp_test"

    def test_env_log_level(self):
        with patch.dict(os.environ, {"KUBEPROMOTE_LOG_LEVEL": "INFO"}):
            config = load_config(path="/nonexistent/kubepromote.json")
        assert config.log_level == "INFO"

    def test_custom_prefix(self):
        with patch.dict(os.environ, {"KP_GITOPS_REPO": "infra"}):
            config = load_config(path="/nonexistent/kubepromote.json", env_prefix="KP")
        assert config.gitops.repo == "infra"
