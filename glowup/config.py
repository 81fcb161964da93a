"""Runtime settings.

Defaults, overridden by an optional YAML file, overridden by ``GLOWUP_*``
environment variables.  The Anthropic API key is read by the LLM client
directly from ``ANTHROPIC_API_KEY``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from glowup.llm.client import DEEP_MODEL, FAST_MODEL
from glowup.triage.catalog import DEFAULT_CATALOG, RuleCatalog, load_catalog
from glowup.triage.gate import DEFAULT_PAUSE_DELAY_SECONDS
from glowup.triage.routing import (
    DEFAULT_LONG_TEXT_THRESHOLD,
    DEFAULT_MAX_SENTENCE_MARKS,
    RoutingPolicy,
    build_default_policy,
)

ENV_PREFIX = "GLOWUP_"
DEFAULT_CONFIG_PATH = Path.home() / ".glowup" / "config.yaml"


@dataclass(frozen=True)
class Settings:
    data_dir: str = str(Path.home() / ".glowup")
    catalog_path: str = ""
    pause_delay_seconds: float = DEFAULT_PAUSE_DELAY_SECONDS
    long_text_threshold: int = DEFAULT_LONG_TEXT_THRESHOLD
    max_sentence_marks: int = DEFAULT_MAX_SENTENCE_MARKS
    temperature: float = 0.85
    max_tokens: int = 1024
    fast_model: str = FAST_MODEL
    deep_model: str = DEEP_MODEL
    log_level: str = "INFO"

    # -- derived objects -----------------------------------------------------

    def load_catalog(self) -> RuleCatalog:
        if self.catalog_path:
            return load_catalog(self.catalog_path)
        return DEFAULT_CATALOG

    def routing_policy(self, catalog: RuleCatalog) -> RoutingPolicy:
        return build_default_policy(
            catalog,
            long_text_threshold=self.long_text_threshold,
            max_sentence_marks=self.max_sentence_marks,
        )

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


def _coerce(value: Any, target: type) -> Any:
    if target is bool:
        return str(value).strip().lower() in ("1", "true", "yes", "on")
    return target(value)


def _apply(settings: Settings, raw: dict[str, Any]) -> Settings:
    types = {f.name: type(getattr(settings, f.name)) for f in fields(settings)}
    updates = {}
    for key, value in raw.items():
        if key in types and value is not None:
            updates[key] = _coerce(value, types[key])
    return replace(settings, **updates)


def load_settings(path: str | Path | None = None, environ: dict[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from defaults, a YAML file, and the environment.

    When *path* is ``None`` the default ``~/.glowup/config.yaml`` is used if
    it exists.
    """
    environ = os.environ if environ is None else environ
    settings = Settings()

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, dict):
            settings = _apply(settings, data)
    elif path:
        raise FileNotFoundError(config_path)

    env_values = {
        f.name: environ[ENV_PREFIX + f.name.upper()]
        for f in fields(settings)
        if ENV_PREFIX + f.name.upper() in environ
    }
    return _apply(settings, env_values)


def configure_logging(level: str = "INFO", handler: logging.Handler | None = None) -> None:
    """Configure root logging once for a CLI or server process."""
    kwargs: dict[str, Any] = {
        "level": getattr(logging, level.upper(), logging.INFO),
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    }
    if handler is not None:
        kwargs["handlers"] = [handler]
        kwargs["format"] = "%(message)s"
    logging.basicConfig(**kwargs)
