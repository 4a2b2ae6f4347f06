"""Описание удалённого репозитория, историю которого нужно сбросить."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_BRANCH = "main"


class ConfigurationError(Exception):
    """Неверные или неполные параметры запуска."""


class Provider(Enum):
    GITHUB = "github"
    GITLAB = "gitlab"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Provider":
        """Разбирает имя провайдера без учёта регистра."""
        value = (raw or "").strip().lower()
        for provider in cls:
            if provider.value == value:
                return provider
        raise ConfigurationError(f"Неизвестный провайдер '{raw}'. Используйте 'github' или 'gitlab'.")


@dataclass(frozen=True)
class RepositoryTarget:
    provider: Provider
    owner_path: str
    repo_name: str
    token: str = field(repr=False)
    gitlab_url: str = DEFAULT_GITLAB_URL
    dry_run: bool = False
    branch: str = DEFAULT_BRANCH

    def __post_init__(self) -> None:
        if not self.owner_path or not self.repo_name:
            raise ConfigurationError("Путь владельца/группы и имя репозитория не могут быть пустыми.")
        if not self.token:
            raise ConfigurationError("Не указан токен доступа.")
        if not self.branch:
            raise ConfigurationError("Не указано имя основной ветки.")
        # frozen=True: нормализуем через object.__setattr__
        object.__setattr__(self, "gitlab_url", (self.gitlab_url or DEFAULT_GITLAB_URL).rstrip("/"))

    @classmethod
    def from_path(
        cls,
        repo_path: str,
        token: str,
        provider: Provider = Provider.GITHUB,
        gitlab_url: str = DEFAULT_GITLAB_URL,
        dry_run: bool = False,
        branch: str = DEFAULT_BRANCH,
    ) -> "RepositoryTarget":
        """
        Строит цель из пути вида owner/repo или group/subgroup/repo.

        Последний сегмент пути - имя репозитория, всё до него - владелец или
        группа (может содержать '/').
        """
        parts = [part for part in (repo_path or "").strip().strip("/").split("/")]
        if len(parts) < 2 or not all(parts):
            raise ConfigurationError(
                f"Неверный формат репозитория '{repo_path}'. "
                "Используйте полный путь (например, owner/repo или group/subgroup/repo)."
            )
        return cls(
            provider=provider,
            owner_path="/".join(parts[:-1]),
            repo_name=parts[-1],
            token=token,
            gitlab_url=gitlab_url,
            dry_run=dry_run,
            branch=branch,
        )

    @property
    def full_path(self) -> str:
        return f"{self.owner_path}/{self.repo_name}"

    @property
    def clone_url(self) -> str:
        if self.provider is Provider.GITHUB:
            return f"https://github.com/{self.full_path}.git"
        return f"{self.gitlab_url}/{self.full_path}.git"
