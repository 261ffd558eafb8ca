import io
import re
import subprocess
from unittest import mock

import pytest

from ghmodels.cli import create_client, main, root_help, token_for_host
from ghmodels.client import NOTICE, NotAuthenticatedError


def test_root_help_describes_subcommands():
    output = root_help()
    assert re.search(r"Usage:\n\s+gh models \[command\]", output)
    assert re.search(r"list\s+List available models", output)
    assert re.search(r"run\s+Run inference with the specified model", output)
    assert re.search(r"view\s+View details about a model", output)
    assert NOTICE in output


def test_main_without_arguments_prints_root_help(capsys):
    assert main([]) == 0
    assert capsys.readouterr().out == root_help()


def test_main_help_flag(capsys):
    assert main(["--help"]) == 0
    assert "Available Commands:" in capsys.readouterr().out


def test_main_help_for_subcommand(capsys):
    assert main(["help", "view"]) == 0
    out = capsys.readouterr().out
    assert "Returns details about the specified model." in out


def test_main_unknown_command(capsys):
    assert main(["bogus"]) == 1
    assert 'unknown command "bogus" for "gh models"' in capsys.readouterr().err


@pytest.fixture
def no_token_env(monkeypatch):
    for name in ("GH_TOKEN", "GITHUB_TOKEN", "GH_ENTERPRISE_TOKEN", "GITHUB_ENTERPRISE_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def test_token_from_environment(no_token_env, monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "token")
    assert token_for_host("github.com") == "token"


def test_token_from_gh_tool(no_token_env):
    done = subprocess.CompletedProcess(args=[], returncode=0, stdout="token\n", stderr="")
    with mock.patch("ghmodels.cli.subprocess.run", return_value=done) as run:
        assert token_for_host("github.com") == "token"
    assert run.call_args.args[0][:3] == ["gh", "auth", "token"]


def test_token_missing_when_gh_fails(no_token_env):
    failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="no")
    with mock.patch("ghmodels.cli.subprocess.run", return_value=failed):
        assert token_for_host("github.com") == ""


def test_token_missing_when_gh_absent(no_token_env):
    with mock.patch("ghmodels.cli.subprocess.run", side_effect=FileNotFoundError()):
        assert token_for_host("github.com") == ""


def test_create_client_without_token_is_unauthenticated():
    err = io.StringIO()
    client = create_client("", err)
    with pytest.raises(NotAuthenticatedError, match="not authenticated"):
        client.list_models()
    assert err.getvalue() == ""


def test_create_client_with_token_reports_nothing():
    err = io.StringIO()
    client = create_client("token", err)
    assert type(client).__name__ == "AzureClient"
    assert err.getvalue() == ""