"""
Сброс истории удалённого репозитория до одного коммита.

Порядок работы:
1. Создаёт новую временную директорию, принадлежащую только этому запуску.
2. Клонирует репозиторий.
3. Создаёт orphan-ветку со снимком текущих файлов, коммитит её и подменяет
   ею основную ветку.
4. Удаляет локальные теги.
5. В режиме dry-run только сообщает, что было бы удалено и запушено.
6. Удаляет теги на удалённом репозитории.
7. Делает force-push основной ветки.
8. Удаляет релизы GitHub/GitLab.

Ошибки шагов 1-3 (кроме удаления старой ветки), force-push и получения списка
релизов прерывают работу. Ошибки удаления отдельных тегов и релизов
превращаются в предупреждения. Временная директория удаляется всегда.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from git_commands import CommandError, GitRunner
from release_clients import ProviderDeleteError, ProviderListError, ReleaseClient, ReleaseRecord, make_release_client
from repo_target import ConfigurationError, RepositoryTarget

WORKSPACE_PREFIX = "git-tmp-"
ORPHAN_BRANCH = "temp_branch"

INFO = "info"
WARNING = "warning"
SUCCESS = "success"
OUTPUT = "output"


@dataclass(frozen=True)
class Event:
    """Сообщение о ходе работы для слоя вывода."""

    level: str
    message: str


class ResetError(Exception):
    """Фатальная ошибка на одном из шагов сброса."""

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"{step}: {cause}")


@dataclass
class ResetResult:
    dry_run: bool = False
    tags: List[str] = field(default_factory=list)
    releases: List[ReleaseRecord] = field(default_factory=list)
    deleted_releases: List[ReleaseRecord] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [event.message for event in self.events if event.level == WARNING]


@contextmanager
def workspace(root: Optional[str] = None) -> Iterator[str]:
    """
    Создаёт новую пустую временную директорию и удаляет её на любом выходе.

    Имя уникально для каждого запуска, поэтому параллельные запуски и чужие
    остатки в том же корне друг другу не мешают.
    """
    try:
        path = tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=root)
    except OSError as exc:
        raise ResetError("подготовка временной директории", exc) from exc
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


class ResetOrchestrator:
    def __init__(
        self,
        target: RepositoryTarget,
        commit_message: str,
        runner: Optional[GitRunner] = None,
        release_client: Optional[ReleaseClient] = None,
        on_event: Optional[Callable[[Event], None]] = None,
        workspace_root: Optional[str] = None,
    ) -> None:
        if not commit_message or not commit_message.strip():
            raise ConfigurationError("Сообщение коммита не может быть пустым.")
        self.target = target
        self.commit_message = commit_message
        self.runner = runner or GitRunner()
        self.release_client = release_client or make_release_client(target)
        self.on_event = on_event
        self.workspace_root = workspace_root
        self.result = ResetResult(dry_run=target.dry_run)

    def _emit(self, level: str, message: str) -> None:
        event = Event(level, message)
        self.result.events.append(event)
        if self.on_event is not None:
            self.on_event(event)

    def _git(self, args: List[str], cwd: str) -> None:
        output = self.runner.run(args, cwd=cwd)
        if output and output.strip():
            self._emit(OUTPUT, output.rstrip())

    def run(self) -> ResetResult:
        with workspace(self.workspace_root) as workdir:
            repo_dir = self._clone(workdir)
            self._rewrite_history(repo_dir)
            tags = self._delete_local_tags(repo_dir)
            if self.target.dry_run:
                self._report_dry_run(tags)
                return self.result
            self._delete_remote_tags(repo_dir, tags)
            self._force_push(repo_dir)
            self._delete_releases()
        return self.result

    def _clone(self, workdir: str) -> str:
        url = self.target.clone_url
        self._emit(INFO, f"Клонирование репозитория: git clone {url}")
        try:
            self._git(["clone", url], cwd=workdir)
        except CommandError as exc:
            raise ResetError("клонирование репозитория", exc) from exc
        return os.path.join(workdir, self.target.repo_name)

    def _rewrite_history(self, repo_dir: str) -> None:
        branch = self.target.branch
        operations = [
            ("создание orphan-ветки", ["checkout", "--orphan", ORPHAN_BRANCH], True),
            ("индексация всех файлов", ["add", "-A"], True),
            ("создание начального коммита", ["commit", "-m", self.commit_message], True),
            # Старой ветки может не быть или она защищена
            ("удаление старой ветки", ["branch", "-D", branch], False),
            (f"переименование ветки в {branch}", ["branch", "-m", branch], True),
        ]
        for desc, args, fatal in operations:
            self._emit(INFO, f"Выполняется: git {' '.join(args)}")
            try:
                self._git(args, cwd=repo_dir)
            except CommandError as exc:
                if fatal:
                    raise ResetError(desc, exc) from exc
                self._emit(WARNING, f"Предупреждение: {desc} не удалось: {exc}")

    def _delete_local_tags(self, repo_dir: str) -> List[str]:
        try:
            tags = self.runner.list_tags(cwd=repo_dir)
        except CommandError as exc:
            raise ResetError("получение списка тегов", exc) from exc
        self.result.tags = list(tags)

        if not tags:
            self._emit(INFO, "Локальных тегов не найдено")
            return self.result.tags

        self._emit(INFO, f"Найдено тегов для удаления: {len(tags)}")
        for tag in tags:
            self._emit(INFO, f"Удаление локального тега: {tag}")
            try:
                self._git(["tag", "-d", tag], cwd=repo_dir)
            except CommandError as exc:
                self._emit(WARNING, f"Предупреждение: не удалось удалить локальный тег {tag}: {exc}")
        return self.result.tags

    def _report_dry_run(self, tags: List[str]) -> None:
        if tags:
            self._emit(INFO, f"Было бы удалено удалённых тегов: {len(tags)}: {', '.join(tags)}")
        self._emit(INFO, f"Была бы выполнена команда: git push -f origin {self.target.branch}")

        releases = self._list_releases()
        if releases:
            self._emit(INFO, "Были бы удалены релизы:")
            for release in releases:
                self._emit(INFO, f"- Релиз {self.release_client.describe(release)}")

    def _delete_remote_tags(self, repo_dir: str, tags: List[str]) -> None:
        for tag in tags:
            try:
                self._git(["push", "origin", "--delete", f"refs/tags/{tag}"], cwd=repo_dir)
            except CommandError as exc:
                self._emit(WARNING, f"Предупреждение: не удалось удалить удалённый тег {tag}: {exc}")
            else:
                self._emit(SUCCESS, f"Удалён удалённый тег: {tag}")

    def _force_push(self, repo_dir: str) -> None:
        branch = self.target.branch
        self._emit(INFO, f"Выполняется: git push -f origin {branch}")
        try:
            self._git(["push", "-f", "origin", branch], cwd=repo_dir)
        except CommandError as exc:
            raise ResetError("отправка изменений", exc) from exc

    def _list_releases(self) -> List[ReleaseRecord]:
        try:
            releases = self.release_client.list_releases()
        except ProviderListError as exc:
            raise ResetError("получение списка релизов", exc) from exc
        self.result.releases = list(releases)
        if not releases:
            self._emit(INFO, "Релизов для удаления не найдено")
        else:
            self._emit(INFO, f"Найдено релизов: {len(releases)}")
        return self.result.releases

    def _delete_releases(self) -> None:
        for release in self._list_releases():
            label = self.release_client.describe(release)
            try:
                self.release_client.delete_release(release)
            except ProviderDeleteError as exc:
                self._emit(WARNING, f"Предупреждение: не удалось удалить релиз {label}: {exc}")
            else:
                self.result.deleted_releases.append(release)
                self._emit(SUCCESS, f"Удалён релиз {label}")


def reset_repository(
    target: RepositoryTarget,
    commit_message: str,
    on_event: Optional[Callable[[Event], None]] = None,
    timeout: Optional[float] = None,
) -> ResetResult:
    """
    Сбрасывает историю репозитория с настройками по умолчанию.

    timeout, если задан, ограничивает и каждую git-команду, и каждый запрос к API.
    """
    if timeout is None:
        runner = GitRunner()
        release_client = make_release_client(target)
    else:
        runner = GitRunner(timeout)
        release_client = make_release_client(target, timeout=timeout)
    orchestrator = ResetOrchestrator(
        target, commit_message, runner=runner, release_client=release_client, on_event=on_event
    )
    return orchestrator.run()
