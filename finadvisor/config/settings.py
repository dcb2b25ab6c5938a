"""Application settings loader from YAML configuration."""
import os
import yaml
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from finadvisor.utils.exceptions import ConfigError

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "advisor.yaml"


@dataclass
class AdvisorSettings:
    """Advisor-wide settings loaded from advisor.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str

    # LLM
    llm_provider: str
    llm_model_name: str
    llm_realtime_model_name: str
    llm_api_key_env: str
    llm_temperature: float
    llm_realtime_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: float
    llm_max_attempts: int
    llm_backoff_factor: float

    # Advisor
    currency: str
    history_turns: int
    realtime_history_turns: int
    top_categories: int

    @classmethod
    def load(cls, config_path: Path = None) -> "AdvisorSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = DEFAULT_SETTINGS_PATH

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        try:
            return cls(
                app_name=config["app"]["name"],
                app_version=str(config["app"]["version"]),
                log_level=config["logging"]["level"],
                llm_provider=config["llm"]["provider"],
                llm_model_name=config["llm"]["model_name"],
                llm_realtime_model_name=config["llm"].get("realtime_model_name") or "",
                llm_api_key_env=config["llm"]["api_key_env"],
                llm_temperature=float(config["llm"]["temperature"]),
                llm_realtime_temperature=float(config["llm"]["realtime_temperature"]),
                llm_max_tokens=int(config["llm"]["max_tokens"]),
                llm_timeout_seconds=float(config["llm"]["timeout_seconds"]),
                llm_max_attempts=int(config["llm"]["max_attempts"]),
                llm_backoff_factor=float(config["llm"]["backoff_factor"]),
                currency=config["advisor"]["currency"],
                history_turns=int(config["advisor"]["history_turns"]),
                realtime_history_turns=int(config["advisor"]["realtime_history_turns"]),
                top_categories=int(config["advisor"]["top_categories"]),
            )
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid configuration file {config_path}: missing {e}")

    def validate(self) -> tuple[bool, str]:
        """Validate configuration values."""
        if not self.llm_model_name:
            return False, "LLM model name is required"

        if self.llm_timeout_seconds <= 0:
            return False, "LLM timeout must be positive"

        # One attempt, plus at most one retry
        if not 1 <= self.llm_max_attempts <= 2:
            return False, "LLM max attempts must be 1 or 2"

        if self.history_turns < 0 or self.realtime_history_turns < 0:
            return False, "History turns cannot be negative"

        if self.top_categories < 1:
            return False, "Top categories must be at least 1"

        return True, "Configuration is valid"

    def api_key(self) -> Optional[str]:
        """Read the provider API key from the configured environment variable."""
        value = os.getenv(self.llm_api_key_env, "").strip()
        return value or None


# Global settings instance
_settings: AdvisorSettings = None


def get_settings() -> AdvisorSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AdvisorSettings.load()
    return _settings
