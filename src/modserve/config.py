"""Server configuration: defaults, YAML file and CLI overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .constants import Constants
from .resolution import ExperimentSet

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """Configuration for the documentation server."""

    host: str = Constants.DEFAULT_HOST
    port: int = Constants.DEFAULT_PORT
    db_path: str = Constants.DEFAULT_DB_PATH
    experiments: Dict[str, int] = field(default_factory=dict)

    @property
    def experiment_set(self) -> ExperimentSet:
        return ExperimentSet(rollouts=dict(self.experiments))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        """Create config from a parsed config file mapping."""
        config = cls()
        server = data.get("server") or {}
        config.host = str(server.get("host", config.host))
        config.port = int(server.get("port", config.port))
        config.db_path = str((data.get("database") or {}).get("path", config.db_path))
        config.experiments = _parse_experiments(data.get("experiments"))
        return config

    @classmethod
    def from_args(cls, args: Any) -> "ServerConfig":
        """Create config from CLI arguments, layered over --config.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            ServerConfig instance.
        """
        config = cls.from_dict(load_config_file(getattr(args, "CONFIG", None)))
        if getattr(args, "HOST", None):
            config.host = args.HOST
        if getattr(args, "PORT", None):
            config.port = int(args.PORT)
        if getattr(args, "DB_PATH", None):
            config.db_path = args.DB_PATH
        for name in getattr(args, "EXPERIMENTS", None) or []:
            config.experiments[name] = 100
        return config


def _parse_experiments(raw: Any) -> Dict[str, int]:
    """Accept either a list of names or a {name: rollout} mapping."""
    if not raw:
        return {}
    if isinstance(raw, list):
        return {str(name): 100 for name in raw}
    if isinstance(raw, dict):
        rollouts = {}
        for name, rollout in raw.items():
            value = int(rollout)
            if not 0 <= value <= 100:
                raise ValueError(f"rollout for experiment {name!r} must be 0-100, got {value}")
            rollouts[str(name)] = value
        return rollouts
    raise ValueError(f"experiments must be a list or mapping, got {type(raw).__name__}")


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML configuration file.

    Args:
        config_path: Path to a YAML config file.

    Returns:
        The parsed mapping; empty when no path is given or the file is missing.
    """
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        logger.warning("Ignoring config file without a top-level mapping: %s", config_path)
        return {}
    return data
