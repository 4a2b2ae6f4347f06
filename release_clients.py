"""
Клиенты релизов GitHub и GitLab.

Оба клиента умеют две вещи: получить полный список релизов репозитория
(со всеми страницами) и удалить один релиз. Ошибка получения списка
(ProviderListError) прерывает очистку релизов целиком, ошибка удаления одного
релиза (ProviderDeleteError) только логируется вызывающей стороной.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from repo_target import DEFAULT_GITLAB_URL, Provider, RepositoryTarget

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
PER_PAGE = 100
# Таймаут одного HTTP-запроса (секунды)
API_TIMEOUT = 30


@dataclass(frozen=True)
class ReleaseRecord:
    """Релиз в не зависящем от провайдера виде."""

    release_id: Optional[int]
    name: str
    tag_name: str


class ProviderError(Exception):
    """Ошибка API провайдера."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (status {status_code})"
        super().__init__(message)


class ProviderListError(ProviderError):
    """Не удалось получить список релизов."""


class ProviderDeleteError(ProviderError):
    """Не удалось удалить один релиз."""


class ReleaseClient:
    """Базовый класс клиента релизов."""

    provider_name = ""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = API_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def list_releases(self) -> List[ReleaseRecord]:
        raise NotImplementedError

    def delete_release(self, release: ReleaseRecord) -> None:
        raise NotImplementedError

    def describe(self, release: ReleaseRecord) -> str:
        return f"{release.name} (tag: {release.tag_name})"

    def _get_all_pages(self, url: str, headers: Dict[str, str]) -> List[Dict[str, Any]]:
        """Забирает все страницы списка, следуя заголовку Link: rel="next"."""
        items: List[Dict[str, Any]] = []
        params: Optional[Dict[str, Any]] = {"per_page": PER_PAGE}
        next_url: Optional[str] = url
        while next_url:
            logger.debug("%s GET %s", self.provider_name, next_url)
            try:
                response = self.session.get(next_url, headers=headers, params=params, timeout=self.timeout)
            except requests.RequestException as exc:
                raise ProviderListError(f"failed to list releases: {exc}") from exc
            if not response.ok:
                raise ProviderListError(f"failed to list releases: {_error_text(response)}", response.status_code)
            try:
                page = response.json()
            except ValueError as exc:
                raise ProviderListError(f"failed to list releases: invalid JSON ({exc})") from exc
            if not isinstance(page, list):
                raise ProviderListError("failed to list releases: unexpected response format")
            items.extend(page)
            # В ссылке next параметры уже есть
            next_url = response.links.get("next", {}).get("url")
            params = None
        return items

    def _delete(self, url: str, headers: Dict[str, str], label: str) -> None:
        logger.debug("%s DELETE %s", self.provider_name, url)
        try:
            response = self.session.delete(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderDeleteError(f"failed to delete release {label}: {exc}") from exc
        if not response.ok:
            raise ProviderDeleteError(
                f"failed to delete release {label}: {_error_text(response)}", response.status_code
            )


def _error_text(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return (response.text or "").strip() or response.reason or "request failed"
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return str(data)


class GitHubReleaseClient(ReleaseClient):
    """Релизы GitHub: удаление по числовому id."""

    provider_name = "GitHub"

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        session: Optional[requests.Session] = None,
        timeout: float = API_TIMEOUT,
    ) -> None:
        super().__init__(session, timeout)
        self.owner = owner
        self.repo = repo
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @property
    def releases_url(self) -> str:
        return f"{GITHUB_API_URL}/repos/{self.owner}/{self.repo}/releases"

    def list_releases(self) -> List[ReleaseRecord]:
        return [
            ReleaseRecord(
                release_id=item["id"],
                name=item.get("name") or "",
                tag_name=item.get("tag_name") or "",
            )
            for item in self._get_all_pages(self.releases_url, self._headers)
        ]

    def delete_release(self, release: ReleaseRecord) -> None:
        self._delete(f"{self.releases_url}/{release.release_id}", self._headers, str(release.release_id))

    def describe(self, release: ReleaseRecord) -> str:
        return f"{release.release_id}: {release.name} (tag: {release.tag_name})"


class GitLabReleaseClient(ReleaseClient):
    """Релизы GitLab: удаление по имени тега."""

    provider_name = "GitLab"

    def __init__(
        self,
        token: str,
        full_path: str,
        base_url: str = DEFAULT_GITLAB_URL,
        session: Optional[requests.Session] = None,
        timeout: float = API_TIMEOUT,
    ) -> None:
        super().__init__(session, timeout)
        self.full_path = full_path
        self.base_url = (base_url or DEFAULT_GITLAB_URL).rstrip("/")
        self._headers = {"PRIVATE-TOKEN": token}

    @property
    def releases_url(self) -> str:
        project = quote(self.full_path, safe="")
        return f"{self.base_url}/api/v4/projects/{project}/releases"

    def list_releases(self) -> List[ReleaseRecord]:
        return [
            ReleaseRecord(
                release_id=None,
                name=item.get("name") or "",
                tag_name=item.get("tag_name") or "",
            )
            for item in self._get_all_pages(self.releases_url, self._headers)
        ]

    def delete_release(self, release: ReleaseRecord) -> None:
        url = f"{self.releases_url}/{quote(release.tag_name, safe='')}"
        self._delete(url, self._headers, release.tag_name)


def make_release_client(
    target: RepositoryTarget,
    session: Optional[requests.Session] = None,
    timeout: float = API_TIMEOUT,
) -> ReleaseClient:
    """Выбирает клиент релизов под провайдера цели."""
    if target.provider is Provider.GITHUB:
        return GitHubReleaseClient(target.token, target.owner_path, target.repo_name, session=session, timeout=timeout)
    return GitLabReleaseClient(target.token, target.full_path, target.gitlab_url, session=session, timeout=timeout)
