"""Export orchestration logic."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from loguru import logger

from ..core.errors import ValidationError
from ..core.models import ExporterConfig, ExportRequest, ExportResult, FileEntry
from ..github_uploader import (
	EnumerationSettings,
	GitHubClient,
	RepositoryProvisioner,
	Uploader,
	build_pacer,
	iter_manifest_files,
	iter_project_files,
)

ClientFactory = Callable[[str], GitHubClient]


@dataclass
class ExportOverrides:
	root: Optional[str] = None
	pacing: Optional[str] = None
	delay: Optional[float] = None


def apply_overrides(config: ExporterConfig, overrides: ExportOverrides) -> ExporterConfig:
	"""Return a copy of `config` with the overrides applied; `config` itself is left untouched."""

	project = config.project
	upload = config.upload
	if overrides.root:
		project = replace(project, root=overrides.root)
	if overrides.pacing:
		upload = replace(upload, pacing=overrides.pacing)
	if overrides.delay is not None:
		upload = replace(upload, delay=overrides.delay)
	return replace(config, project=project, upload=upload)


def default_client_factory(config: ExporterConfig) -> ClientFactory:
	def factory(token: str) -> GitHubClient:
		return GitHubClient(
			token,
			api_base_url=config.github.api_base_url,
			timeout=config.github.request_timeout,
		)

	return factory


def validate_request(request: ExportRequest) -> None:
	token = (request.token or "").strip()
	repo_name = (request.repo_name or "").strip()
	if not token or not repo_name:
		raise ValidationError("token and repoName are required")


def collect_files(config: ExporterConfig) -> Iterator[FileEntry]:
	"""Enumerate the project, from the manifest when one is configured."""

	settings = EnumerationSettings.from_config(config.project)
	root = Path(config.project.root).expanduser()
	if config.project.manifest:
		logger.info(f"Using manifest with {len(config.project.manifest)} entries")
		return iter_manifest_files(root, config.project.manifest, settings)
	return iter_project_files(root, settings)


def run_export(
	request: ExportRequest,
	config: ExporterConfig,
	client_factory: Optional[ClientFactory] = None,
	overrides: Optional[ExportOverrides] = None,
	sleep: Callable[[float], None] = time.sleep,
) -> ExportResult:
	validate_request(request)

	if overrides:
		config = apply_overrides(config, overrides)

	factory = client_factory or default_client_factory(config)
	client = factory(request.token.strip())

	logger.info(f"Starting GitHub export to repository '{request.repo_name}'")

	provisioner = RepositoryProvisioner(client, config.github)
	repository = provisioner.provision(
		request.repo_name.strip(),
		request.repo_description or config.github.default_description,
	)

	if config.github.repo_init_delay > 0:
		logger.debug(f"Waiting {config.github.repo_init_delay:.1f}s for repository initialisation")
		sleep(config.github.repo_init_delay)

	entries: List[FileEntry] = list(collect_files(config))
	logger.info(f"Found {len(entries)} files to export")

	uploader = Uploader(
		client,
		pacer=build_pacer(config.upload, sleep=sleep),
		commit_message_template=config.github.commit_message_template,
	)
	summary = uploader.upload_all(repository, entries)

	logger.info(f"Export finished: {summary.uploaded}/{summary.total} files uploaded to {repository.html_url}")
	return ExportResult(repository=repository, summary=summary)
