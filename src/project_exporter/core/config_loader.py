"""Helpers for loading exporter configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from .config_validator import ConfigValidator
from .errors import ConfigurationError
from .models import ExporterConfig

DEFAULT_CONFIG_PATH = "config/exporter.yaml"


def _expand_env(value: Any) -> Any:
	"""Recursively expand environment variables in strings."""

	if isinstance(value, str):
		return os.path.expandvars(value)
	if isinstance(value, list):
		return [_expand_env(item) for item in value]
	if isinstance(value, dict):
		return {key: _expand_env(val) for key, val in value.items()}
	return value


def _drop_unset(value: Any) -> Any:
	"""Treat values that still reference an unset variable as absent."""

	if isinstance(value, dict):
		return {
			key: _drop_unset(val)
			for key, val in value.items()
			if not (isinstance(val, str) and val.startswith("${"))
		}
	return value


def resolve_config_path(path: Optional[str | Path] = None) -> Path:
	return Path(path or os.getenv("EXPORTER_CONFIG") or DEFAULT_CONFIG_PATH)


def load_exporter_config(path: Optional[str | Path] = None, validate: bool = True) -> ExporterConfig:
	"""
	Load YAML config and return an :class:`ExporterConfig` instance.

	Args:
		path: Path to the configuration YAML file. Falls back to
			``$EXPORTER_CONFIG`` and then ``config/exporter.yaml``.
		validate: Whether to perform configuration validation (default: True)

	Returns:
		ExporterConfig instance

	Raises:
		FileNotFoundError: If an explicitly given config file doesn't exist
		ConfigurationError: If validation fails with errors
	"""

	config_path = resolve_config_path(path)
	if not config_path.exists():
		if path is not None:
			raise FileNotFoundError(f"Config file not found: {config_path}")
		logger.info(f"No config file at {config_path}; using built-in defaults")
		return ExporterConfig()

	with config_path.open("r", encoding="utf-8") as handle:
		data: Dict[str, Any] = yaml.safe_load(handle) or {}

	if not isinstance(data, dict):
		raise ConfigurationError(f"Config file {config_path} must contain a mapping at the top level")

	expanded = _expand_env(data)
	usable = _drop_unset(expanded)

	if validate:
		result = ConfigValidator(config_dict=usable, expanded_dict=expanded).validate()
		result.log_summary()
		if not result.is_valid:
			details = "; ".join(str(error) for error in result.errors)
			raise ConfigurationError(f"Invalid configuration in {config_path}: {details}")

	return ExporterConfig.from_dict(usable)
