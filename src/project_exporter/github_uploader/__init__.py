"""
GitHub Uploader Module
Provisions a repository and uploads project files to it through the GitHub REST API.
"""

from .enumerator import EnumerationSettings, iter_manifest_files, iter_project_files
from .github_client import GitHubAPIError, GitHubClient
from .pacing import FixedDelayPacer, Pacer, RateLimitHeaderPacer, TokenBucketPacer, build_pacer
from .provisioner import RepositoryProvisioner
from .uploader import Uploader

__all__ = [
    'EnumerationSettings',
    'FixedDelayPacer',
    'GitHubAPIError',
    'GitHubClient',
    'Pacer',
    'RateLimitHeaderPacer',
    'RepositoryProvisioner',
    'TokenBucketPacer',
    'Uploader',
    'build_pacer',
    'iter_manifest_files',
    'iter_project_files',
]
