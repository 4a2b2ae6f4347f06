from typing import Dict, Iterable, List, Optional

import pytest

from git_commands import CommandError
from release_clients import ProviderDeleteError, ProviderListError, ReleaseRecord
from repo_target import Provider, RepositoryTarget


class FakeRunner:
    """Записывает git-команды вместо запуска; failures: команда -> вывод ошибки."""

    def __init__(
        self,
        tags: Optional[List[str]] = None,
        failures: Optional[Dict[str, str]] = None,
        tag_error: bool = False,
    ) -> None:
        self.tags = tags or []
        self.failures = failures or {}
        self.tag_error = tag_error
        self.commands: List[str] = []
        self.cwds: List[Optional[str]] = []

    def run(self, args, cwd=None):
        command = "git " + " ".join(args)
        self.commands.append(command)
        self.cwds.append(cwd)
        if command in self.failures:
            raise CommandError(command, self.failures[command], returncode=1)
        return ""

    def list_tags(self, cwd=None):
        self.commands.append("git tag")
        self.cwds.append(cwd)
        if self.tag_error:
            raise CommandError("git tag", "fatal: not a git repository", returncode=128)
        return list(self.tags)


class FakeReleaseClient:
    def __init__(
        self,
        releases: Optional[List[ReleaseRecord]] = None,
        list_error: bool = False,
        fail_delete: Iterable[str] = (),
    ) -> None:
        self.releases = releases or []
        self.list_error = list_error
        self.fail_delete = set(fail_delete)
        self.list_calls = 0
        self.delete_calls: List[ReleaseRecord] = []

    def list_releases(self):
        self.list_calls += 1
        if self.list_error:
            raise ProviderListError("failed to list releases: Bad credentials", 401)
        return list(self.releases)

    def delete_release(self, release):
        self.delete_calls.append(release)
        if release.tag_name in self.fail_delete:
            raise ProviderDeleteError(f"failed to delete release {release.tag_name}", 403)

    def describe(self, release):
        return f"{release.name} (tag: {release.tag_name})"


@pytest.fixture
def github_target():
    return RepositoryTarget(Provider.GITHUB, "owner", "repo", token="secret-token")


@pytest.fixture
def dry_run_target():
    return RepositoryTarget(Provider.GITHUB, "owner", "repo", token="secret-token", dry_run=True)
