"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from JSON files
- Provides typed access to all kubepromote settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- Credentials (GitHub token, cluster token, Slack webhook) are expected from
  the environment, never from a committed file
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json
import logging
import os

from kubepromote.domain.value_objects.promotion_chain import DEFAULT_STAGES, PromotionChain
from kubepromote.domain.value_objects.workload_instance import DEFAULT_LABEL_KEY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KubernetesConfig:
    """Cluster connection configuration."""
    kubeconfig: str = ""
    context: str = ""
    server: str = ""
    token: str = ""
    ca_data: str = ""  # base64-encoded CA bundle
    label_key: str = DEFAULT_LABEL_KEY


@dataclass(frozen=True)
class GitOpsConfig:
    """Version-pinning repository configuration."""
    token: str = ""
    owner: str = ""
    repo: str = ""
    path_template: str = "clusters/kbot/{namespace}/image-policy.yaml"
    default_branch: str = "main"
    prod_branch: str = "prod"
    prod_namespace: str = "prod"


@dataclass(frozen=True)
class HistoryConfig:
    """Release history database configuration."""
    db_path: str = "data/history.db"


@dataclass(frozen=True)
class ObserverConfig:
    """Cluster query retry configuration."""
    max_attempts: int = 3
    retry_delay_seconds: float = 30.0


@dataclass(frozen=True)
class PipelineConfig:
    """Promotion chain configuration."""
    stages: tuple[str, ...] = DEFAULT_STAGES
    promotable: tuple[str, ...] = ()
    listable: tuple[str, ...] = ()

    def chain(self) -> PromotionChain:
        return PromotionChain(
            stages=self.stages,
            promotable=self.promotable,
            listable=self.listable,
        )


@dataclass(frozen=True)
class NotificationsConfig:
    """Notification configuration."""
    slack_webhook_url: str = ""
    slack_channel: str = ""


@dataclass(frozen=True)
class PromoterConfig:
    """Root configuration for the kubepromote application."""
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    gitops: GitOpsConfig = field(default_factory=GitOpsConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    observer: ObserverConfig = field(default_factory=ObserverConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    log_level: str = "WARNING"


def _env_override(data: dict, prefix: str = "KUBEPROMOTE") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern KUBEPROMOTE_SECTION_KEY.
    For example: KUBEPROMOTE_GITOPS_TOKEN=..., KUBEPROMOTE_PIPELINE_STAGES=dev,qa,prod
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        parts = key[len(prefix) + 1:].lower().split("_", 1)
        if len(parts) == 2 and parts[0] in _SECTIONS:
            section, field_name = parts
            if section not in data:
                data[section] = {}
            data[section][field_name] = value
        else:
            data[key[len(prefix) + 1:].lower()] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    for f in dataclasses.fields(cls):
        if f.name not in filtered:
            continue
        val = filtered[f.name]

        # Comma-separated strings and lists become tuples for tuple fields
        if f.type == "tuple[str, ...]":
            if isinstance(val, str):
                filtered[f.name] = tuple(v.strip() for v in val.split(",") if v.strip())
            elif isinstance(val, list):
                filtered[f.name] = tuple(val)
        elif isinstance(val, str):
            if f.type == "int":
                filtered[f.name] = int(val)
            elif f.type == "float":
                filtered[f.name] = float(val)
            elif f.type == "bool":
                filtered[f.name] = val.lower() in ("true", "1", "yes")

    return cls(**filtered)


_SECTIONS = {
    "kubernetes": KubernetesConfig,
    "gitops": GitOpsConfig,
    "history": HistoryConfig,
    "observer": ObserverConfig,
    "pipeline": PipelineConfig,
    "notifications": NotificationsConfig,
}


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "KUBEPROMOTE",
) -> PromoterConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (KUBEPROMOTE_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to kubepromote.json in CWD.
        env_prefix: Environment variable prefix. Defaults to KUBEPROMOTE.
    """
    config_path = Path(path) if path else Path("kubepromote.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    sections = {
        name: _build_sub_config(cls, data.get(name, {}))
        for name, cls in _SECTIONS.items()
    }
    return PromoterConfig(**sections, log_level=data.get("log_level", "WARNING"))
