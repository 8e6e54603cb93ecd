import pytest

from project_exporter.core.errors import AuthenticationError, RepositoryCreationError
from project_exporter.core.models import GitHubConfig
from project_exporter.github_uploader import RepositoryProvisioner


def test_provision_returns_repository(client, fake_github):
    fake_github.default_branch = "trunk"

    repo = RepositoryProvisioner(client, GitHubConfig()).provision("demo", "desc")

    assert repo.owner_login == "octocat"
    assert repo.name == "demo"
    assert repo.html_url == "https://github.com/octocat/demo"
    assert repo.default_branch == "trunk"


def test_identity_rejection_short_circuits_creation(client, fake_github):
    fake_github.user_status = 401

    with pytest.raises(AuthenticationError) as excinfo:
        RepositoryProvisioner(client, GitHubConfig()).provision("demo", "desc")

    assert excinfo.value.status_code == 401
    assert fake_github.calls_to("POST") == []


def test_creation_rejection_keeps_remote_message(client, fake_github):
    fake_github.create_status = 422

    with pytest.raises(RepositoryCreationError) as excinfo:
        RepositoryProvisioner(client, GitHubConfig()).provision("demo", "desc")

    assert excinfo.value.remote_message == "name already exists on this account"
    assert "name already exists" in excinfo.value.message
    assert excinfo.value.status_code == 400
    assert len(fake_github.calls_to("POST", "/user/repos")) == 1


def test_private_and_auto_init_come_from_config(client, fake_github):
    config = GitHubConfig(private=True, auto_init=False)

    RepositoryProvisioner(client, config).provision("demo", "desc")

    body = fake_github.calls_to("POST", "/user/repos")[0]["json"]
    assert body["private"] is True
    assert body["auto_init"] is False
