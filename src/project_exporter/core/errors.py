"""Exception taxonomy for the export workflow."""

from __future__ import annotations

from typing import Optional


class ExportError(Exception):
	"""Base class for failures the HTTP layer knows how to report."""

	status_code: int = 500

	def __init__(self, message: str, status_code: Optional[int] = None):
		super().__init__(message)
		self.message = message
		if status_code is not None:
			self.status_code = status_code


class ValidationError(ExportError):
	"""A required request field is missing."""

	status_code = 400


class AuthenticationError(ExportError):
	"""GitHub rejected the credential during the identity lookup."""

	status_code = 401


class RepositoryCreationError(ExportError):
	"""GitHub refused to create the repository."""

	status_code = 400

	def __init__(self, remote_message: str):
		super().__init__(f"Repository could not be created: {remote_message}")
		self.remote_message = remote_message


class PerFileUploadError(ExportError):
	"""A single file was rejected by the Contents API."""

	def __init__(self, path: str, message: str, status_code: Optional[int] = None):
		super().__init__(f"{path}: {message}", status_code)
		self.path = path
		self.reason = message


class ProjectRootError(ExportError):
	"""The project root cannot be enumerated at all."""


class ConfigurationError(Exception):
	"""The exporter configuration failed validation."""
