"""
Configuration management for promostep.

Loads $PROMOSTEP_HOME/config.yaml (default ~/.config/promostep/config.yaml).
The configuration only covers ambient concerns of the command line:
default project and logging. The step itself is configured per invocation.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

LOG_FORMATS = ("structured", "pretty")


class ConfigError(Exception):
    """Configuration validation error."""
    pass


def get_promostep_home() -> Path:
    """Return the promostep home directory ($PROMOSTEP_HOME or ~/.config/promostep)."""
    home = os.environ.get("PROMOSTEP_HOME")
    if home:
        return Path(home)
    return Path("~/.config/promostep").expanduser()


@dataclass
class PromoStepConfig:
    """
    Ambient promostep configuration.

    Attributes:
        project: Default project used by `promostep run` without --project
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "structured" (JSON) or "pretty" (rich console)
        log_file: Optional log file path
        env_file: Optional .env file loaded into the environment
    """
    project: str = ""
    log_level: str = "INFO"
    log_format: str = "pretty"
    log_file: Optional[str] = None
    env_file: Optional[str] = None

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )

    def get_log_file_path(self) -> Optional[Path]:
        return Path(self.log_file).expanduser() if self.log_file else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PromoStepConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)


def load_config(config_path: Optional[Path] = None) -> PromoStepConfig:
    """
    Load promostep configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $PROMOSTEP_HOME/config.yaml

    Returns:
        PromoStepConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If the config is invalid
    """
    if config_path is None:
        config_path = get_promostep_home() / "config.yaml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"promostep config.yaml not found at {config_path}. Run `promostep init`."
        )

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping")

    config = PromoStepConfig.from_dict(data)
    if config.env_file:
        load_dotenv(Path(config.env_file).expanduser())
    return config
