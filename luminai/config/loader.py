"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. ``config/config.yaml`` -- static defaults checked into the repo
  2. ``.env`` file           -- local developer overrides (not committed)
  3. Environment vars        -- set at deploy time

:func:`load_config` reads the YAML file first, then deep-merges the
environment-backed :class:`Settings` values on top.
"""

from pathlib import Path

import yaml

from luminai.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built settings; a fresh ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "completion": {
            "base_url": settings.openai_base_url,
            "text_model": settings.openai_text_model,
            "vision_model": settings.openai_vision_model,
            "configured": bool(settings.openai_api_key),
        },
        "embedding": {
            "provider": settings.embedding_provider,
            "model": (
                settings.openai_embedding_model
                if settings.embedding_provider == "openai"
                else settings.sentence_transformer_model
            ),
        },
        "pipeline": {
            "chunk_size": settings.chunk_size,
            "chunk_overlap": settings.chunk_overlap,
            "top_k": settings.retrieval_top_k,
            "group_max_chars": settings.summary_group_max_chars,
            "min_summary_length": settings.min_summary_length,
            "teardown_policy": settings.teardown_policy,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
