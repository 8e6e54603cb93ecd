"""
Sequential upload of project files through the Contents API.
"""

from typing import Iterable, Mapping, Optional

from loguru import logger

from ..core.errors import PerFileUploadError
from ..core.models import FileEntry, ProvisionedRepository, UploadResult, UploadSummary
from .github_client import GitHubAPIError, GitHubClient
from .pacing import FixedDelayPacer, Pacer

PROGRESS_EVERY = 10


class Uploader:
    """Uploads files one at a time and collects a result for each of them."""

    def __init__(self, client: GitHubClient, pacer: Optional[Pacer] = None,
                 commit_message_template: str = "Add {path}"):
        self.client = client
        self.pacer = pacer or FixedDelayPacer()
        self.commit_message_template = commit_message_template

    def upload_all(self, repository: ProvisionedRepository,
                   entries: Iterable[FileEntry]) -> UploadSummary:
        """
        Upload every entry to the repository's default branch.

        A rejected file is recorded as failed and the run carries on with
        the next one.

        Args:
            repository: Target repository
            entries: Files to upload

        Returns:
            UploadSummary with exactly one result per entry
        """
        entries = list(entries)
        summary = UploadSummary()
        successful_count = 0

        logger.info(f"Starting upload of {len(entries)} files to {repository.owner_login}/{repository.name}...")

        for entry in entries:
            result = self.upload_one(repository, entry)
            summary.results.append(result)

            if result.succeeded:
                successful_count += 1
                if successful_count % PROGRESS_EVERY == 0 or successful_count == len(entries):
                    logger.info(f"Uploaded {successful_count}/{len(entries)}")
            else:
                logger.warning(f"Failed to upload {entry.relative_path}: {result.error_message}")

        logger.info(f"Upload completed: {successful_count}/{summary.total} successful, {summary.total - successful_count} failed")

        if summary.total > successful_count:
            logger.warning(f"Files that could not be uploaded: {', '.join(summary.failed_paths)}")

        return summary

    def _existing_sha(self, repository: ProvisionedRepository, path: str) -> Optional[str]:
        try:
            return self.client.get_file_sha(
                repository.owner_login, repository.name, path,
                branch=repository.default_branch,
            )
        except GitHubAPIError as e:
            # Only a successful lookup yields a sha; anything else uploads as a new file
            logger.warning(f"Existence check for {path} failed ({e.status_code}): {e.message}")
            return None

    def upload_one(self, repository: ProvisionedRepository, entry: FileEntry) -> UploadResult:
        """Check for an existing blob, PUT the content, and pace."""
        headers: Mapping[str, str] = {}
        self.pacer.before_upload()

        try:
            sha = self._existing_sha(repository, entry.relative_path)
            if sha:
                logger.debug(f"Updating existing file: {entry.relative_path}")
            else:
                logger.debug(f"Creating new file: {entry.relative_path}")

            try:
                response = self.client.put_file_contents(
                    repository.owner_login,
                    repository.name,
                    entry.relative_path,
                    entry.content,
                    message=self.commit_message_template.format(path=entry.relative_path),
                    branch=repository.default_branch,
                    sha=sha,
                )
            except GitHubAPIError as e:
                headers = e.headers
                raise PerFileUploadError(entry.relative_path, e.message, e.status_code) from e

            headers = response.headers
            return UploadResult(path=entry.relative_path, succeeded=True, remote_sha=_remote_sha(response))

        except PerFileUploadError as e:
            return UploadResult(path=entry.relative_path, succeeded=False, error_message=e.reason)
        except Exception as e:
            logger.error(f"Error while uploading {entry.relative_path}: {e}")
            return UploadResult(path=entry.relative_path, succeeded=False, error_message=str(e))
        finally:
            self.pacer.after_upload(headers)


def _remote_sha(response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    content = payload.get("content")
    return content.get("sha") if isinstance(content, dict) else None
