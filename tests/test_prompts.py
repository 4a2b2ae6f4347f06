import io

import pytest
from rich.console import Console

import prompts
from prompts import MAX_MESSAGE_LENGTH, ask_commit_message, confirm_reset


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def answers(monkeypatch):
    asked = []

    def install(confirm=None, prompt=None):
        def fake_confirm(question, default=None, console=None):
            asked.append((question, default))
            return confirm

        def fake_prompt(question, default=None, console=None):
            asked.append((question, default))
            return prompt

        monkeypatch.setattr(prompts.Confirm, "ask", fake_confirm)
        monkeypatch.setattr(prompts.Prompt, "ask", fake_prompt)
        return asked

    return install


@pytest.mark.parametrize("reply", [True, False])
def test_confirm_reset_returns_answer(answers, console, reply):
    asked = answers(confirm=reply)

    assert confirm_reset(False, "main", console=console) is reply
    assert asked == [("Продолжить?", False)]


def test_confirm_reset_destructive_warning(answers, console):
    answers(confirm=True)

    confirm_reset(False, "develop", console=console)

    text = console.file.getvalue()
    assert "ветки develop будут схлопнуты" in text
    assert "НЕЛЬЗЯ ОТМЕНИТЬ" in text
    assert "DRY RUN" not in text


def test_confirm_reset_dry_run_warning(answers, console):
    answers(confirm=True)

    confirm_reset(True, "main", console=console)

    text = console.file.getvalue()
    assert "DRY RUN" in text
    assert "ничего не будет отправлено" in text
    assert "НЕЛЬЗЯ ОТМЕНИТЬ" not in text


def test_ask_commit_message_strips_input(answers, console):
    answers(prompt="  feat: fresh start  ")
    assert ask_commit_message(console=console) == "feat: fresh start"


def test_ask_commit_message_passes_default(answers, console):
    asked = answers(prompt="chore: squash")

    ask_commit_message("chore: squash", console=console)

    assert asked == [("Введите сообщение начального коммита", "chore: squash")]


def test_ask_commit_message_is_truncated(answers, console):
    answers(prompt="x" * 150)
    assert ask_commit_message(console=console) == "x" * MAX_MESSAGE_LENGTH


@pytest.mark.parametrize("reply", ["", "   ", None])
def test_ask_commit_message_blank(answers, console, reply):
    answers(prompt=reply)
    assert ask_commit_message(console=console) == ""
