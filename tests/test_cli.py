"""Tests for the cellar command line."""

import pytest

from cellar import main as cli


def test_serve_defaults():
    args = cli.build_parser().parse_args(["serve"])
    assert args.command == "serve"
    assert args.port == 8000


def test_subcommand_required():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_create_user_prints_token(monkeypatch, capsys):
    async def create_user(email):
        return "tok-abc"

    monkeypatch.setattr(cli, "_create_user", create_user)
    assert cli.main(["create-user", "a@example.com"]) == 0
    assert capsys.readouterr().out.strip() == "tok-abc"


def test_errors_exit_non_zero(monkeypatch, capsys):
    async def issue_token(email):
        raise ValueError(f"no user with email {email}")

    monkeypatch.setattr(cli, "_issue_token", issue_token)
    assert cli.main(["issue-token", "ghost@example.com"]) == 1
    assert "no user with email ghost@example.com" in capsys.readouterr().err
