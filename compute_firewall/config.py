"""TOML-based client configuration.

Loads ~/.compute_firewall/defaults.toml (global) and compute-firewall.toml
(project), merges them, and builds ``ComputeConfig`` / ``LogConfig`` from
the ``[compute]`` and ``[logging]`` tables.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeAlias, TypeVar

from compute_firewall.core.exceptions import ConfigurationError
from compute_firewall.observability.logging import LogConfig

RawConfig: TypeAlias = dict[str, Any]
T = TypeVar("T")

GLOBAL_CONFIG_PATH = Path.home() / ".compute_firewall" / "defaults.toml"
PROJECT_CONFIG_NAME = "compute-firewall.toml"

DEFAULT_API_ENDPOINT = "https://compute.googleapis.com/compute/v1"
DEFAULT_SCOPES = ("https://www.googleapis.com/auth/compute",)


@dataclass(frozen=True, slots=True)
class ComputeConfig:
    """Connection settings for the Compute Engine API.

    Args:
        project: GCP project ID. Auto-detected from the environment or ADC.
        api_endpoint: Base URL of the Compute Engine REST API.
        timeout: Total timeout per HTTP request, in seconds.
        poll_interval: Delay between operation status polls, in seconds.
        operation_timeout: Default deadline for ``Operation.wait``.
        scopes: OAuth scopes requested from Application Default Credentials.
    """

    project: str | None = None
    api_endpoint: str = DEFAULT_API_ENDPOINT
    timeout: float = 30.0
    poll_interval: float = 2.0
    operation_timeout: float = 300.0
    scopes: tuple[str, ...] = DEFAULT_SCOPES


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("compute", {})
    merged.setdefault("logging", {})
    return merged


def _build(cls: type[T], raw: RawConfig, table: str) -> T:
    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    if unknown := sorted(set(raw) - known):
        raise ConfigurationError(
            f"Unknown key(s) in [{table}]: {', '.join(unknown)}. "
            f"Valid: {', '.join(sorted(known))}"
        )
    if isinstance(raw.get("scopes"), list):
        raw = {**raw, "scopes": tuple(raw["scopes"])}
    return cls(**raw)


def resolve_compute_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> ComputeConfig:
    config = load_config(project_dir=project_dir, global_path=global_path)
    return _build(ComputeConfig, config["compute"], "compute")


def resolve_log_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> LogConfig:
    config = load_config(project_dir=project_dir, global_path=global_path)
    return _build(LogConfig, config["logging"], "logging")


def resolve_project(explicit: str | None) -> str:
    """Resolve GCP project: explicit > env > ADC."""
    if explicit:
        return explicit

    if env_project := os.environ.get("GOOGLE_CLOUD_PROJECT"):
        return env_project

    if env_project := os.environ.get("GCLOUD_PROJECT"):
        return env_project

    import google.auth
    from google.auth.exceptions import DefaultCredentialsError

    try:
        _, project = google.auth.default()
    except DefaultCredentialsError as e:
        raise ConfigurationError(f"No GCP project found: {e}") from e
    if project:
        return project

    raise ConfigurationError(
        "No GCP project found. Set GOOGLE_CLOUD_PROJECT, pass project= to "
        "ComputeConfig, or configure Application Default Credentials."
    )
