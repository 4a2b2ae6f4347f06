#!/usr/bin/env python3
"""
Полная очистка истории удалённого репозитория GitHub/GitLab.

Клонирует репозиторий во временную директорию, заменяет основную ветку одним
коммитом со всеми текущими файлами, удаляет все теги (локально и на сервере),
делает force-push и удаляет все релизы.

Использование:
  python clear_history.py -r owner/repo -t <token>
  python clear_history.py -r owner/repo -t <token> -n -m "feat: fresh start"
  python clear_history.py -r group/subgroup/repo -t <token> -p gitlab -g https://gitlab.example.com
  python clear_history.py -r owner/repo -t <token> -d -n

Предупреждения:
- Операция необратима: вся история ветки и все теги/релизы будут потеряны.
- clone и push используют настроенные в git учётные данные, токен нужен для API релизов.
- С --dry-run выполняются только локальные операции, на сервер ничего не отправляется.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from git_commands import DEFAULT_TIMEOUT
from release_clients import API_TIMEOUT
from prompts import ask_commit_message, confirm_reset
from repo_target import DEFAULT_BRANCH, DEFAULT_GITLAB_URL, ConfigurationError, Provider, RepositoryTarget
from reset_repo import INFO, OUTPUT, SUCCESS, WARNING, Event, ResetError, reset_repository

__version__ = "1.0.0"

DEFAULT_COMMIT_MESSAGE = "Initial commit"

LOGO = r"""
  ___ _                 _  _ _    _
 / __| |___ __ _ _ _   | || (_)__| |_ ___ _ _ _  _
| (__| / -_) _` | '_|  | __ | (_-<  _/ _ \ '_| || |
 \___|_\___\__,_|_|    |_||_|_/__/\__\___/_|  \_, |
                                              |__/
"""

STYLES = {
    SUCCESS: "bold #04B575",
    INFO: "#87C1FF",
    WARNING: "#FFA07A",
    OUTPUT: "",
}
ERROR_STYLE = "bold #FF616E"
LOGO_STYLE = "bold #FF86C8"

console = Console(highlight=False)


def positive_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"ожидается число секунд, получено '{value}'") from None
    if not seconds > 0:
        raise argparse.ArgumentTypeError(f"таймаут должен быть больше нуля, получено '{value}'")
    return seconds


def printable(text: str) -> str:
    """Заменяет байты не из UTF-8 (surrogateescape из вывода git) на U+FFFD."""
    return text.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="clear-history",
        description="Сбросить историю удалённого репозитория до одного коммита и удалить теги и релизы.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-r",
        "--repo",
        default="",
        help="Путь репозитория (например, owner/repo или group/subgroup/repo).",
    )
    parser.add_argument("-t", "--token", default="", help="Персональный токен доступа.")
    parser.add_argument(
        "-p",
        "--provider",
        default="github",
        help="Провайдер: github или gitlab (по умолчанию: github).",
    )
    parser.add_argument(
        "-g",
        "--gitlab-url",
        default=DEFAULT_GITLAB_URL,
        help=f"URL инстанса GitLab для self-hosted (по умолчанию: {DEFAULT_GITLAB_URL}).",
    )
    parser.add_argument(
        "-b",
        "--branch",
        default=DEFAULT_BRANCH,
        help=f"Основная ветка, которую нужно переписать (по умолчанию: {DEFAULT_BRANCH}).",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Выполнить только локальные операции, ничего не отправляя на сервер.",
    )
    parser.add_argument(
        "-n",
        "--no-interactive",
        action="store_true",
        help="Без вопросов (без -m используется сообщение по умолчанию).",
    )
    parser.add_argument(
        "-m",
        "--message",
        default="",
        help="Сообщение коммита (вопрос о сообщении пропускается).",
    )
    parser.add_argument(
        "--timeout",
        type=positive_seconds,
        default=None,
        help=(
            "Таймаут каждой git-команды и каждого запроса к API в секундах "
            f"(по умолчанию: {DEFAULT_TIMEOUT} для git, {API_TIMEOUT} для API)."
        ),
    )
    parser.add_argument("--verbose", action="store_true", help="Подробный отладочный вывод.")
    return parser.parse_args(argv)


def build_target(args: argparse.Namespace) -> RepositoryTarget:
    """Проверяет аргументы и собирает RepositoryTarget."""
    if not args.repo or not args.token:
        raise ConfigurationError("Не указаны обязательные аргументы --repo и --token.")
    provider = Provider.parse(args.provider)
    return RepositoryTarget.from_path(
        args.repo,
        token=args.token,
        provider=provider,
        gitlab_url=args.gitlab_url if provider is Provider.GITLAB else DEFAULT_GITLAB_URL,
        dry_run=args.dry_run,
        branch=args.branch,
    )


def render_event(event: Event) -> None:
    console.print(printable(event.message), style=STYLES.get(event.level, ""), markup=False)


def show_logo() -> None:
    console.print(LOGO, style=LOGO_STYLE, markup=False)


def resolve_commit_message(args: argparse.Namespace, target: RepositoryTarget) -> Optional[str]:
    """
    Определяет сообщение коммита и спрашивает подтверждение.

    Возвращает None, если пользователь отменил операцию.
    """
    message = args.message.strip()
    if message:
        console.print(f"Используется указанное сообщение коммита: '{message}'", style=STYLES[INFO], markup=False)
    elif args.no_interactive:
        message = DEFAULT_COMMIT_MESSAGE
        console.print(f"Используется сообщение коммита по умолчанию: '{message}'", style=STYLES[INFO], markup=False)

    if args.no_interactive:
        if target.dry_run:
            console.print(f"DRY RUN: будет смоделировано схлопывание всех коммитов ветки {target.branch}", style=STYLES[WARNING])
        else:
            console.print(
                f"ВНИМАНИЕ: все коммиты ветки {target.branch} будут схлопнуты (без интерактивного подтверждения)",
                style=STYLES[WARNING],
            )
        return message

    if not confirm_reset(target.dry_run, target.branch, console=console):
        return None
    if not message:
        message = ask_commit_message(DEFAULT_COMMIT_MESSAGE, console=console)
    return message or None


def run(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    show_logo()

    try:
        target = build_target(args)
    except ConfigurationError as exc:
        console.print(printable(f"Ошибка: {exc}"), style=ERROR_STYLE, markup=False)
        sys.exit(1)

    message = resolve_commit_message(args, target)
    if not message:
        console.print("Отменено пользователем.", style=STYLES[INFO])
        return

    try:
        result = reset_repository(target, message, on_event=render_event, timeout=args.timeout)
    except ResetError as exc:
        console.print(printable(f"Ошибка: {exc}"), style=ERROR_STYLE, markup=False)
        sys.exit(1)

    if result.dry_run:
        console.print("\nDry run завершён. На сервер ничего не отправлено.", style=STYLES[INFO])
    else:
        console.print(
            f"\nИстория репозитория {target.full_path} сброшена с сообщением: '{message}'",
            style=STYLES[SUCCESS],
            markup=False,
        )
        console.print("Все теги и релизы удалены.", style=STYLES[SUCCESS])
    if result.warnings:
        console.print(f"Предупреждений: {len(result.warnings)}", style=STYLES[WARNING])


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        run(argv)
    except KeyboardInterrupt:
        sys.exit("\nПрервано пользователем.")


if __name__ == "__main__":
    main()
