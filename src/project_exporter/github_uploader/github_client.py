"""
GitHub client for the REST calls the exporter needs.
Covers identity lookup, repository creation and the Contents API.
"""

import base64
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from loguru import logger

from ..core.models import DEFAULT_API_BASE_URL


class GitHubAPIError(Exception):
    """A GitHub API call answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(f"GitHub API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.headers = dict(headers or {})


class GitHubClient:
    """GitHub API client bound to a single access token."""

    def __init__(self, token: str, api_base_url: str = DEFAULT_API_BASE_URL,
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        """
        Initialize GitHub client.

        Args:
            token: Personal access token used as bearer credential
            api_base_url: Root of the REST API
            timeout: Per-request timeout in seconds
            session: Optional session, mainly for connection reuse and tests
        """
        if not token:
            raise ValueError("A GitHub token is required")

        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json"
        }

    def _make_request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Make an authenticated request to the GitHub API.

        Args:
            method: HTTP method
            path: Path below the API root, starting with a slash
            **kwargs: Additional request parameters

        Returns:
            Response object

        Raises:
            GitHubAPIError: If GitHub answers with a non-2xx status
            requests.exceptions.RequestException: On transport failures
        """
        url = f"{self.api_base_url}{path}"
        response = self.session.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError:
            message = _extract_error_message(response)
            logger.debug(f"{method} {path} -> {response.status_code}: {message}")
            raise GitHubAPIError(response.status_code, message, response.headers)

        return response

    def get_authenticated_user(self) -> Dict[str, Any]:
        """Return the profile of the user owning the token."""
        return self._make_request("GET", "/user").json()

    def create_repository(self, name: str, description: str, private: bool = False,
                          auto_init: bool = True) -> Dict[str, Any]:
        """
        Create a repository owned by the authenticated user.

        Returns:
            GitHub API response data, including ``html_url`` and ``default_branch``
        """
        data = {
            "name": name,
            "description": description,
            "private": private,
            "auto_init": auto_init
        }
        return self._make_request("POST", "/user/repos", json=data).json()

    def get_file_sha(self, owner: str, repo: str, file_path: str,
                     branch: Optional[str] = None) -> Optional[str]:
        """
        Get the SHA of an existing file in the repository.

        Args:
            owner: Repository owner login
            repo: Repository name
            file_path: Path to file in repository
            branch: Branch to look on, the default branch when omitted

        Returns:
            SHA string if file exists, None otherwise
        """
        params = {"ref": branch} if branch else None

        try:
            response = self._make_request("GET", _contents_path(owner, repo, file_path), params=params)
        except GitHubAPIError as e:
            if e.status_code == 404:
                return None  # File doesn't exist
            raise

        payload = response.json()
        # A directory listing comes back as a list and has no blob sha
        if isinstance(payload, dict):
            return payload.get("sha")
        return None

    def put_file_contents(self, owner: str, repo: str, file_path: str, content: bytes,
                          message: str, branch: str, sha: Optional[str] = None) -> requests.Response:
        """
        Create or update a single file through the Contents API.

        Args:
            owner: Repository owner login
            repo: Repository name
            file_path: Path where file should be stored in repo
            content: Raw file bytes
            message: Commit message
            branch: Target branch
            sha: Blob sha of the file being replaced, omitted for new files

        Returns:
            Response object of the PUT call
        """
        data = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": branch
        }
        if sha:
            data["sha"] = sha

        return self._make_request("PUT", _contents_path(owner, repo, file_path), json=data)


def _contents_path(owner: str, repo: str, file_path: str) -> str:
    return f"/repos/{quote(owner)}/{quote(repo)}/contents/{quote(file_path, safe='/')}"


def _extract_error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text or response.reason or f"HTTP {response.status_code}"
