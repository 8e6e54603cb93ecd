"""
Repository provisioning: resolve the token owner and create the target repository.
"""

from loguru import logger

from ..core.errors import AuthenticationError, RepositoryCreationError
from ..core.models import GitHubConfig, ProvisionedRepository
from .github_client import GitHubAPIError, GitHubClient


class RepositoryProvisioner:
    """Creates the repository an export writes into. Never retries."""

    def __init__(self, client: GitHubClient, config: GitHubConfig):
        self.client = client
        self.config = config

    def provision(self, name: str, description: str) -> ProvisionedRepository:
        """
        Create a new repository owned by the authenticated user.

        Args:
            name: Repository name
            description: Repository description

        Returns:
            The created repository

        Raises:
            AuthenticationError: If GitHub rejects the token
            RepositoryCreationError: If GitHub refuses to create the repository
        """
        try:
            user = self.client.get_authenticated_user()
        except GitHubAPIError as e:
            logger.error(f"GitHub identity lookup failed ({e.status_code}): {e.message}")
            raise AuthenticationError("Could not fetch GitHub user information") from e

        login = user.get("login")
        if not login:
            raise AuthenticationError("Could not fetch GitHub user information")
        logger.info(f"Authenticated as {login}")

        try:
            repo_data = self.client.create_repository(
                name,
                description,
                private=self.config.private,
                auto_init=self.config.auto_init,
            )
        except GitHubAPIError as e:
            logger.error(f"Repository creation failed ({e.status_code}): {e.message}")
            raise RepositoryCreationError(e.message) from e

        repository = ProvisionedRepository(
            owner_login=(repo_data.get("owner") or {}).get("login") or login,
            name=repo_data.get("name") or name,
            html_url=repo_data.get("html_url") or f"https://github.com/{login}/{name}",
            default_branch=repo_data.get("default_branch") or "main",
        )
        logger.info(f"Repository created: {repository.html_url}")
        return repository
