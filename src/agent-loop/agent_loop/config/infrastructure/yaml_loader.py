"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from agent_loop.config.domain.config import AppConfig
from agent_loop.config.domain.observer import ConfigObserver
from agent_loop.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from agent_loop.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns an AppConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> AppConfig:
        """
        Load, interpolate, validate, and return an AppConfig from a YAML file.

        Raises:
            ConfigLoadError: if the file is missing or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated or provider ids collide.
        """
        raw = _parse_yaml(path=path)
        _check_missing_env_vars(raw=raw)
        interpolated = interpolate(raw)
        _check_duplicate_provider_ids(interpolated=interpolated)
        cfg = _build_config(interpolated=interpolated)
        _emit_warnings(cfg=cfg, observer=self._observer)
        self._observer.config_loaded(name=cfg.name, num_providers=len(cfg.providers))
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigLoadError(path=path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason="invalid YAML") from exc


def _check_missing_env_vars(raw: Any) -> None:
    """Raise MissingEnvVarsError if any ${ENV_VAR} references in raw are unset."""
    missing = collect_missing_vars(raw)
    if missing:
        raise MissingEnvVarsError(missing)


def _check_duplicate_provider_ids(interpolated: Any) -> None:
    """
    Reject configs in which two providers share an id.

    Provider ids key the connection pool, so a collision would silently route
    one provider's calls to the other's process.

    Raises:
        ConfigValidationError: listing ALL duplicated ids before raising.
    """
    if not isinstance(interpolated, dict):
        return
    providers_raw: list[Any] = interpolated.get("providers", []) or []

    seen: set[str] = set()
    duplicates: list[str] = []
    for provider in providers_raw:
        if not isinstance(provider, dict):
            continue
        provider_id = provider.get("id")
        if not isinstance(provider_id, str):
            continue
        if provider_id in seen and provider_id not in duplicates:
            duplicates.append(provider_id)
        seen.add(provider_id)

    if duplicates:
        detail = "; ".join(f"duplicate provider id '{pid}'" for pid in duplicates)
        raise ConfigValidationError(detail)


def _build_config(interpolated: Any) -> AppConfig:
    try:
        return AppConfig.model_validate(interpolated)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _emit_warnings(cfg: AppConfig, observer: ConfigObserver) -> None:
    if not any(provider.enabled for provider in cfg.providers):
        observer.config_no_enabled_providers(name=cfg.name)
