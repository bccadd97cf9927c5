import os
from pathlib import Path
from typing import Optional

import yaml

from vibereview_core.providers.base import REVIEW_DEPTHS
from vibereview_core.providers.registry import PROVIDERS

DEFAULT_CONFIG: dict = {
    "provider": "openai",
    "model": None,  # None = the provider's default model
    "review_depth": "standard",
    "include": ["**/*"],
    "exclude": [],
    "max_files": 10,
    "language": "english",
    "custom_instruction": "",
    "fail_on_critical": False,
}

_API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


class ConfigError(ValueError):
    """Invalid run configuration. Always fatal."""


def parse_patterns(value) -> list[str]:
    """Accept a YAML list or a comma-separated string of glob patterns."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    return [p.strip() for p in items if p.strip()]


def load_config(config_path: str = ".vibereview.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .vibereview.yml in the current directory
      3. CLI argument overrides
    """
    config = {
        **DEFAULT_CONFIG,
        "include": list(DEFAULT_CONFIG["include"]),
        "exclude": list(DEFAULT_CONFIG["exclude"]),
    }

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["include"] = parse_patterns(config.get("include"))
    config["exclude"] = parse_patterns(config.get("exclude"))

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    # Provider-agnostic key, e.g. a single `api_key` action secret.
    config["api_key"] = os.environ.get("VIBEREVIEW_API_KEY")

    return config


def validate_config(config: dict) -> None:
    """Reject configuration the run cannot start with."""
    provider = config.get("provider")
    if provider not in PROVIDERS:
        raise ConfigError(f"Invalid provider: {provider!r}. Must be one of: {', '.join(sorted(PROVIDERS))}.")

    depth = config.get("review_depth")
    if depth not in REVIEW_DEPTHS:
        raise ConfigError(f"Invalid review depth: {depth!r}. Must be one of: {', '.join(REVIEW_DEPTHS)}.")

    max_files = config.get("max_files")
    if isinstance(max_files, bool) or not isinstance(max_files, int) or max_files < 1:
        raise ConfigError(f"max_files must be a positive integer, got {max_files!r}.")


def api_key_for(config: dict) -> Optional[str]:
    """Return the API key for the configured provider, or None."""
    if config.get("api_key"):
        return config["api_key"]
    return config.get(f"{config.get('provider')}_api_key")


def api_key_env_var(provider: str) -> str:
    return _API_KEY_ENV.get(provider, "VIBEREVIEW_API_KEY")
