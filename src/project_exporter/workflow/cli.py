"""Command-line entry for the exporter."""

from __future__ import annotations

import argparse
import os
import sys

from loguru import logger

from ..core.config_loader import load_exporter_config
from ..core.errors import ExportError
from ..core.models import ExporterConfig, ExportRequest
from .pipeline import ExportOverrides, run_export


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="project-exporter", description="Export a project to a new GitHub repository")
	parser.add_argument("--config", default=None, help="Path to exporter YAML config")
	subparsers = parser.add_subparsers(dest="command", required=True)

	serve = subparsers.add_parser("serve", help="Run the HTTP API")
	serve.add_argument("--host", help="Override the bind address")
	serve.add_argument("--port", type=int, help="Override the listening port")

	export = subparsers.add_parser("export", help="Export once, using the GH_TOKEN environment variable")
	export.add_argument("--repo-name", required=True, help="Name of the repository to create")
	export.add_argument("--description", help="Repository description")
	export.add_argument("--root", help="Project directory to export")
	export.add_argument("--pacing", choices=["fixed", "token_bucket", "adaptive"], help="Override pacing strategy")
	export.add_argument("--delay", type=float, help="Override delay between uploads in seconds")
	return parser


def configure_logging(config: ExporterConfig) -> None:
	logger.remove()
	logger.add(sys.stderr, level=config.logging.level)


def _serve(config: ExporterConfig, args: argparse.Namespace) -> int:
	import uvicorn

	from ..api.app import create_app

	host = args.host or config.server.host
	port = args.port or config.server.port
	logger.info(f"Serving exporter API on http://{host}:{port}")
	uvicorn.run(create_app(config), host=host, port=port)
	return 0


def _export(config: ExporterConfig, args: argparse.Namespace) -> int:
	token = os.getenv("GH_TOKEN")
	if not token:
		logger.error("GH_TOKEN environment variable is required")
		return 2

	request = ExportRequest(token=token, repo_name=args.repo_name, repo_description=args.description)
	overrides = ExportOverrides(root=args.root, pacing=args.pacing, delay=args.delay)

	try:
		result = run_export(request, config, overrides=overrides)
	except ExportError as e:
		logger.error(e.message)
		return 1

	summary = result.summary
	print("[INFO] Export completed")
	print(f"[INFO] Repository: {result.repository.html_url}")
	print(f"[INFO] Files found: {summary.total}")
	print(f"[INFO] Files uploaded: {summary.uploaded}")
	print(f"[INFO] Files failed: {summary.failed}")
	for path in summary.failed_paths:
		print(f"[WARN]   {path}")
	return 0 if summary.failed == 0 else 3


def main(argv: list[str] | None = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)

	config = load_exporter_config(args.config)
	configure_logging(config)

	if args.command == "serve":
		return _serve(config, args)
	return _export(config, args)


if __name__ == "__main__":
	raise SystemExit(main())
