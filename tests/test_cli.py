from __future__ import annotations

import re
from pathlib import Path

import pytest

from chat_composer.__main__ import main

PUBKEY = "cd" * 32


@pytest.fixture(autouse=True)
def _keep_default_logging(monkeypatch) -> None:
    # setup_logging caches loggers bound to the stderr captured for one test.
    monkeypatch.setattr("chat_composer.__main__.setup_logging", lambda level: None)


@pytest.fixture()
def config_path(tmp_path: Path) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(
        f"log_level: WARNING\n"
        f"account:\n  pubkey: {PUBKEY}\n"
        f"storage:\n  db_path: {tmp_path / 'cli.db'}\n",
        encoding="utf-8",
    )
    return str(path)


def _run(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


def test_config_check(config_path: str, capsys) -> None:
    main(["config-check", "-c", config_path])
    out = capsys.readouterr().out
    assert "Configuration valid" in out
    assert PUBKEY in out


def test_send_and_history(config_path: str, tmp_path: Path, capsys) -> None:
    attachment = tmp_path / "notes.txt"
    attachment.write_text("remember the milk", encoding="utf-8")

    assert _run("add-group", "g1", "--name", "Home", "--relay", "wss://home", "-c", config_path) == 0
    assert _run("add-contact", PUBKEY, "--display-name", "Me", "-c", config_path) == 0
    assert _run("send", "g1", "-t", "shopping list", "-a", str(attachment), "-c", config_path) == 0
    capsys.readouterr()

    assert _run("history", "g1", "-c", config_path) == 0
    out = capsys.readouterr().out
    assert "Me: shopping list" in out
    assert "[notes.txt]" in out


def test_send_empty_message_is_blocked(config_path: str, capsys) -> None:
    assert _run("add-group", "g1", "--name", "Home", "-c", config_path) == 0
    assert _run("send", "g1", "-c", config_path) == 1
    assert "empty_draft" in capsys.readouterr().err


def test_send_to_unknown_group(config_path: str, capsys) -> None:
    assert _run("send", "missing", "-t", "hi", "-c", config_path) == 1
    assert "Unknown group" in capsys.readouterr().err


def test_reply_target_must_belong_to_the_group(config_path: str, capsys) -> None:
    assert _run("add-group", "g1", "--name", "Home", "-c", config_path) == 0
    assert _run("add-group", "g2", "--name", "Work", "-c", config_path) == 0
    capsys.readouterr()
    assert _run("send", "g2", "-t", "standup at ten", "-c", config_path) == 0
    work_id = re.search(r"✓ sent ([0-9a-f]{64})", capsys.readouterr().out).group(1)

    assert _run("send", "g1", "-t", "see above", "-r", work_id, "-c", config_path) == 1
    assert "Unknown message in Home" in capsys.readouterr().err

    assert _run("send", "g2", "-t", "see above", "-r", work_id, "-c", config_path) == 0
    capsys.readouterr()
    assert _run("history", "g2", "-c", config_path) == 0
    assert f"↪ {work_id[:8]}" in capsys.readouterr().out
