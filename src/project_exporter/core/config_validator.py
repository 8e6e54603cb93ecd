"""Configuration validation and environment variable checking."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List

from loguru import logger

PACING_STRATEGIES = ("fixed", "token_bucket", "adaptive")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ConfigIssue:
	"""Represents a configuration validation problem."""

	field_path: str
	message: str
	severity: str  # 'error' or 'warning'

	def __str__(self) -> str:
		prefix = "ERROR" if self.severity == "error" else "WARNING"
		return f"{prefix}: {self.field_path} - {self.message}"


@dataclass
class ValidationResult:
	"""Result of configuration validation."""

	errors: List[ConfigIssue]
	warnings: List[ConfigIssue]

	@property
	def is_valid(self) -> bool:
		"""Returns True if there are no errors (warnings are acceptable)."""
		return len(self.errors) == 0

	def log_summary(self) -> None:
		"""Write every issue to the log."""
		for warning in self.warnings:
			logger.warning(f"Config {warning.field_path}: {warning.message}")
		for error in self.errors:
			logger.error(f"Config {error.field_path}: {error.message}")


class ConfigValidator:
	"""Validates exporter configuration after environment variable expansion."""

	def __init__(self, config_dict: Dict[str, Any], expanded_dict: Dict[str, Any]):
		"""
		Initialize validator with the usable config and the raw expansion.

		Args:
			config_dict: Expanded config with unset ``${VAR}`` values removed
			expanded_dict: Config dict straight after environment variable expansion
		"""
		self.config_dict = config_dict
		self.expanded_dict = expanded_dict
		self.errors: List[ConfigIssue] = []
		self.warnings: List[ConfigIssue] = []

	def validate(self) -> ValidationResult:
		"""
		Run all validation checks.

		Returns:
			ValidationResult containing errors and warnings
		"""
		self.errors = []
		self.warnings = []

		self._check_github_section()
		self._check_upload_section()
		self._check_server_section()
		self._check_logging_section()
		self._check_unexpanded_vars()

		return ValidationResult(errors=self.errors, warnings=self.warnings)

	def _error(self, field_path: str, message: str) -> None:
		self.errors.append(ConfigIssue(field_path=field_path, message=message, severity="error"))

	def _check_github_section(self) -> None:
		github = self.config_dict.get("github") or {}

		template = github.get("commit_message_template")
		if template is not None and "{path}" not in str(template):
			self._error("github.commit_message_template", "Template must contain a {path} placeholder.")

		for key in ("request_timeout", "repo_init_delay"):
			value = github.get(key)
			if value is None:
				continue
			if not _is_number(value) or float(value) < 0:
				self._error(f"github.{key}", f"Expected a non-negative number, got {value!r}.")

	def _check_upload_section(self) -> None:
		upload = self.config_dict.get("upload") or {}

		pacing = upload.get("pacing")
		if pacing is not None and pacing not in PACING_STRATEGIES:
			self._error(
				"upload.pacing",
				f"Unknown pacing strategy {pacing!r}. Choose one of: {', '.join(PACING_STRATEGIES)}.",
			)

		delay = upload.get("delay")
		if delay is not None and (not _is_number(delay) or float(delay) < 0):
			self._error("upload.delay", f"Expected a non-negative number, got {delay!r}.")

		rate = upload.get("requests_per_minute")
		if rate is not None and (not _is_number(rate) or float(rate) <= 0):
			self._error("upload.requests_per_minute", f"Expected a positive number, got {rate!r}.")

		burst = upload.get("burst")
		if burst is not None and (not _is_number(burst) or float(burst) < 1):
			self._error("upload.burst", f"Burst size must be at least 1, got {burst!r}.")

	def _check_server_section(self) -> None:
		port = (self.config_dict.get("server") or {}).get("port")
		if port is None:
			return
		if not _is_number(port) or not 0 < float(port) < 65536:
			self._error("server.port", f"Port must be between 1 and 65535, got {port!r}.")

	def _check_logging_section(self) -> None:
		level = (self.config_dict.get("logging") or {}).get("level")
		if level is not None and str(level).upper() not in LOG_LEVELS:
			self._error("logging.level", f"Unknown log level {level!r}.")

	def _check_unexpanded_vars(self) -> None:
		"""Check for any unexpanded ${VAR} patterns that might cause issues."""
		unexpanded = self._find_unexpanded_vars(self.expanded_dict)

		for var_name, field_path, value in unexpanded:
			self.warnings.append(ConfigIssue(
				field_path=field_path,
				message=f"Value contains unexpanded variable: {value}. Environment variable ${{{var_name}}} may not be set.",
				severity="warning"
			))

	def _find_unexpanded_vars(self, obj: Any, path: str = "") -> List[tuple[str, str, str]]:
		"""
		Find unexpanded ${VAR} patterns in the expanded config.

		Returns:
			List of (var_name, field_path, value) tuples
		"""
		results = []

		if isinstance(obj, str):
			matches = re.findall(r'\$\{([A-Z_][A-Z0-9_]*)\}', obj)
			for var_name in matches:
				results.append((var_name, path, obj))

		elif isinstance(obj, dict):
			for key, value in obj.items():
				new_path = f"{path}.{key}" if path else key
				results.extend(self._find_unexpanded_vars(value, new_path))

		elif isinstance(obj, list):
			for i, item in enumerate(obj):
				new_path = f"{path}[{i}]"
				results.extend(self._find_unexpanded_vars(item, new_path))

		return results


def _is_number(value: Any) -> bool:
	if isinstance(value, bool):
		return False
	try:
		float(value)
	except (TypeError, ValueError):
		return False
	return True
