"""Core datamodels used across the project exporter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_EXCLUDED_NAMES = [
	".git",
	"node_modules",
	".next",
	"dist",
	"build",
	".env",
	".env.local",
	"__pycache__",
]
DEFAULT_ALLOWED_DOTFILES = [".well-known"]


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GitHubConfig:
	"""Settings for talking to the GitHub REST API."""

	api_base_url: str = DEFAULT_API_BASE_URL
	request_timeout: float = 30.0
	repo_init_delay: float = 2.0
	default_description: str = "Exported with project-exporter"
	commit_message_template: str = "Add {path}"
	private: bool = False
	auto_init: bool = True


@dataclass
class UploadConfig:
	"""Pacing between Contents API uploads."""

	pacing: str = "fixed"
	delay: float = 0.3
	requests_per_minute: float = 60.0
	burst: int = 1


@dataclass
class ProjectConfig:
	"""Which files of the project get exported."""

	root: str = "."
	exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_NAMES))
	allow_dotfiles: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_DOTFILES))
	manifest: List[str] = field(default_factory=list)


@dataclass
class ServerConfig:
	host: str = "127.0.0.1"
	port: int = 8000


@dataclass
class LoggingConfig:
	level: str = "INFO"


@dataclass
class ExporterConfig:
	github: GitHubConfig = field(default_factory=GitHubConfig)
	upload: UploadConfig = field(default_factory=UploadConfig)
	project: ProjectConfig = field(default_factory=ProjectConfig)
	server: ServerConfig = field(default_factory=ServerConfig)
	logging: LoggingConfig = field(default_factory=LoggingConfig)

	@staticmethod
	def from_dict(payload: Dict[str, Any]) -> "ExporterConfig":
		github_section = payload.get("github") or {}
		upload_section = payload.get("upload") or {}
		project_section = payload.get("project") or {}
		server_section = payload.get("server") or {}
		logging_section = payload.get("logging") or {}

		return ExporterConfig(
			github=GitHubConfig(
				api_base_url=(github_section.get("api_base_url") or DEFAULT_API_BASE_URL).rstrip("/"),
				request_timeout=float(github_section.get("request_timeout", 30.0)),
				repo_init_delay=float(github_section.get("repo_init_delay", 2.0)),
				default_description=github_section.get("default_description", "Exported with project-exporter"),
				commit_message_template=github_section.get("commit_message_template", "Add {path}"),
				private=bool(github_section.get("private", False)),
				auto_init=bool(github_section.get("auto_init", True)),
			),
			upload=UploadConfig(
				pacing=str(upload_section.get("pacing", "fixed")),
				delay=float(upload_section.get("delay", 0.3)),
				requests_per_minute=float(upload_section.get("requests_per_minute", 60.0)),
				burst=int(upload_section.get("burst", 1)),
			),
			project=ProjectConfig(
				root=project_section.get("root") or ".",
				exclude=list(project_section.get("exclude", DEFAULT_EXCLUDED_NAMES)),
				allow_dotfiles=list(project_section.get("allow_dotfiles", DEFAULT_ALLOWED_DOTFILES)),
				manifest=list(project_section.get("manifest") or []),
			),
			server=ServerConfig(
				host=server_section.get("host", "127.0.0.1"),
				port=int(server_section.get("port", 8000)),
			),
			logging=LoggingConfig(
				level=str(logging_section.get("level", "INFO")).upper(),
			),
		)


# ---------------------------------------------------------------------------
# Runtime data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileEntry:
	"""One project file ready to be written through the Contents API."""

	relative_path: str
	content: bytes
	mode: str = "100644"
	kind: str = "blob"


@dataclass
class UploadResult:
	path: str
	succeeded: bool
	remote_sha: Optional[str] = None
	error_message: Optional[str] = None


@dataclass
class UploadSummary:
	results: List[UploadResult] = field(default_factory=list)

	@property
	def total(self) -> int:
		return len(self.results)

	@property
	def uploaded(self) -> int:
		return sum(1 for result in self.results if result.succeeded)

	@property
	def failed_paths(self) -> List[str]:
		return [result.path for result in self.results if not result.succeeded]

	@property
	def failed(self) -> int:
		return len(self.failed_paths)

	def to_stats(self) -> Dict[str, Any]:
		return {
			"total": self.total,
			"uploaded": self.uploaded,
			"failed": self.failed,
			"failedFiles": self.failed_paths,
		}


@dataclass
class ProvisionedRepository:
	owner_login: str
	name: str
	html_url: str
	default_branch: str = "main"


@dataclass
class ExportRequest:
	token: Optional[str]
	repo_name: Optional[str]
	repo_description: Optional[str] = None


@dataclass
class ExportResult:
	repository: ProvisionedRepository
	summary: UploadSummary
