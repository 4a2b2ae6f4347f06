"""
Запуск git-команд для clear_history.

Все команды выполняются в явно переданной директории (cwd), текущая
директория процесса не меняется. stdout и stderr объединяются в один вывод,
ненулевой код возврата превращается в CommandError.

Вывод декодируется с surrogateescape: имена тегов с байтами не из UTF-8
переживают обратную передачу в аргументы git (например, tag -d).
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Таймаут одной git-команды (секунды)
DEFAULT_TIMEOUT = 300


class CommandError(Exception):
    """git-команда завершилась с ошибкой."""

    def __init__(self, command: str, output: str = "", returncode: Optional[int] = None, reason: str = "") -> None:
        self.command = command
        self.output = output
        self.returncode = returncode
        self.reason = reason or (f"exit status {returncode}" if returncode is not None else "unknown error")
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.output.strip():
            return f"Команда '{self.command}' завершилась с ошибкой: {self.reason}\nВывод: {self.output.strip()}"
        return f"Команда '{self.command}' завершилась с ошибкой: {self.reason}"


def run_git(
    args: Sequence[str],
    *,
    cwd: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    combine_output: bool = True,
) -> str:
    """
    Запускает git и возвращает его вывод.

    По умолчанию stderr склеивается с stdout. С combine_output=False
    возвращается только stdout, а stderr попадает в CommandError при ошибке.
    """
    command = " ".join(["git", *args])
    logger.debug("git: %s (cwd=%s)", command, cwd)
    try:
        result = subprocess.run(
            ["git", *args],
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if combine_output else subprocess.PIPE,
            cwd=cwd,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise CommandError(command, reason=f"git не найден ({exc})") from exc
    except subprocess.TimeoutExpired as exc:
        output = exc.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="surrogateescape")
        raise CommandError(command, output, reason=f"таймаут {timeout} с") from exc

    output = result.stdout or ""
    if result.returncode != 0:
        if not combine_output and result.stderr:
            output = output + result.stderr
        raise CommandError(command, output, returncode=result.returncode)
    return output


def list_tags(cwd: Optional[str] = None, timeout: Optional[float] = DEFAULT_TIMEOUT) -> List[str]:
    """Возвращает список тегов локального репозитория (пустой, если тегов нет)."""
    output = run_git(["tag"], cwd=cwd, timeout=timeout, combine_output=False)
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitRunner:
    """Исполнитель git-команд с общим таймаутом; подменяется в тестах."""

    def __init__(self, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> str:
        return run_git(args, cwd=cwd, timeout=self.timeout)

    def list_tags(self, cwd: Optional[str] = None) -> List[str]:
        return list_tags(cwd=cwd, timeout=self.timeout)
