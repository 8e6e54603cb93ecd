"""Shared fixtures: an in-memory stand-in for the GitHub REST API."""

from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlsplit

import pytest
import requests

from project_exporter.core.models import ExporterConfig
from project_exporter.github_uploader import GitHubClient

API_BASE = "https://api.github.test"


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.reason = "Fake"
        self.text = "" if payload is None else str(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


class FakeGitHub:
    """Routes the handful of endpoints the exporter calls and records every call."""

    def __init__(self, login: str = "octocat"):
        self.login = login
        self.user_status = 200
        self.create_status = 201
        self.create_error = "name already exists on this account"
        self.default_branch = "main"
        self.existing: Dict[str, str] = {}
        self.rejected: Dict[str, int] = {}
        self.broken: Dict[str, Exception] = {}
        self.check_failures: Dict[str, int] = {}
        self.raw_put_bodies: Dict[str, Any] = {}
        self.upload_headers: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []
        self.uploaded: Dict[str, Dict[str, Any]] = {}

    # requests.Session compatible entry point
    def request(self, method, url, headers=None, timeout=None, params=None, json=None, **kwargs):
        path = unquote(urlsplit(url).path)
        self.calls.append({"method": method, "path": path, "json": json, "params": params, "headers": headers})

        if path == "/user" and method == "GET":
            if self.user_status != 200:
                return FakeResponse(self.user_status, {"message": "Bad credentials"})
            return FakeResponse(200, {"login": self.login})

        if path == "/user/repos" and method == "POST":
            if self.create_status >= 300:
                return FakeResponse(self.create_status, {"message": self.create_error})
            return FakeResponse(201, {
                "name": json["name"],
                "owner": {"login": self.login},
                "html_url": f"https://github.com/{self.login}/{json['name']}",
                "default_branch": self.default_branch,
            })

        prefix = f"/repos/{self.login}/"
        if path.startswith(prefix) and "/contents/" in path:
            file_path = path.split("/contents/", 1)[1]
            if method == "GET":
                if file_path in self.check_failures:
                    return FakeResponse(self.check_failures[file_path], {"message": "Forbidden"})
                if file_path in self.existing:
                    return FakeResponse(200, {"sha": self.existing[file_path], "path": file_path})
                return FakeResponse(404, {"message": "Not Found"})
            if method == "PUT":
                if file_path in self.broken:
                    raise self.broken[file_path]
                if file_path in self.rejected:
                    return FakeResponse(self.rejected[file_path], {"message": "Invalid request"}, self.upload_headers)
                self.uploaded[file_path] = json
                if file_path in self.raw_put_bodies:
                    return FakeResponse(201, self.raw_put_bodies[file_path], self.upload_headers)
                new_sha = f"sha-{len(self.uploaded)}"
                status = 200 if "sha" in json else 201
                return FakeResponse(status, {"content": {"path": file_path, "sha": new_sha}}, self.upload_headers)

        return FakeResponse(404, {"message": "Not Found"})

    def calls_to(self, method: str, path_prefix: str = "") -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["path"].startswith(path_prefix)]


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def client(fake_github) -> GitHubClient:
    return GitHubClient("test-token", api_base_url=API_BASE, session=fake_github)


@pytest.fixture
def client_factory(fake_github):
    def factory(token: str) -> GitHubClient:
        return GitHubClient(token, api_base_url=API_BASE, session=fake_github)

    return factory


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def project_tree(tmp_path) -> Path:
    """The three-file project: a.txt, sub/b.txt and an excluded .env."""
    (tmp_path / "a.txt").write_text("alpha\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_text("beta\n", encoding="utf-8")
    (tmp_path / ".env").write_text("SECRET=1\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def exporter_config(project_tree) -> ExporterConfig:
    config = ExporterConfig()
    config.github.api_base_url = API_BASE
    config.project.root = str(project_tree)
    return config
