"""Интерактивные вопросы: подтверждение и ввод сообщения коммита."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

MAX_MESSAGE_LENGTH = 100


def confirm_reset(dry_run: bool, branch: str = "main", console: Optional[Console] = None) -> bool:
    """Спрашивает подтверждение. False - пользователь отказался."""
    console = console or Console()
    console.print("⚠️  ВНИМАНИЕ ⚠️", style="bold #FFA07A")
    if dry_run:
        console.print(
            f"Будет смоделировано схлопывание всех коммитов ветки {branch} (DRY RUN).\n"
            "Все локальные операции будут выполнены, но ничего не будет отправлено.",
            style="bold #FF86C8",
        )
    else:
        console.print(
            f"Все коммиты ветки {branch} будут схлопнуты в один.\n"
            "ЭТО РАЗРУШИТЕЛЬНАЯ ОПЕРАЦИЯ, ЕЁ НЕЛЬЗЯ ОТМЕНИТЬ!",
            style="bold #FF86C8",
        )
    return Confirm.ask("Продолжить?", default=False, console=console)


def ask_commit_message(default: str = "Initial commit", console: Optional[Console] = None) -> str:
    """Запрашивает сообщение начального коммита (Enter - оставить default)."""
    console = console or Console()
    message = Prompt.ask(
        "Введите сообщение начального коммита",
        default=default,
        console=console,
    )
    return (message or "").strip()[:MAX_MESSAGE_LENGTH]
