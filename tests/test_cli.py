import json

import pytest

from tokenauth.cli import create_parser, main

SECRET = "cli-test-secret-long-enough-for-hs256-signing"


@pytest.fixture
def secret_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", SECRET)


def _issue(capsys, *args):
    assert main(["issue", *args]) == 0
    return capsys.readouterr().out.strip()


def test_issue_then_inspect(secret_env, capsys):
    token = _issue(capsys, "testuser", "--claim", "userId=12345", "--claim", "role=USER")

    assert main(["inspect", token]) == 0
    claims = json.loads(capsys.readouterr().out)
    assert claims["sub"] == "testuser"
    assert claims["userId"] == "12345"
    assert claims["role"] == "USER"
    assert round((claims["exp"] - claims["iat"]) * 1000) == 86_400_000


def test_issue_custom_expiration(secret_env, capsys):
    token = _issue(capsys, "alice", "--expires-ms", "5000")
    main(["inspect", token])
    claims = json.loads(capsys.readouterr().out)
    assert round((claims["exp"] - claims["iat"]) * 1000) == 5_000


def test_verify(secret_env, capsys):
    token = _issue(capsys, "alice")
    assert main(["verify", token, "--subject", "alice"]) == 0
    assert capsys.readouterr().out.strip() == "valid"
    assert main(["verify", token, "--subject", "bob"]) == 1
    assert capsys.readouterr().out.strip() == "invalid"
    assert main(["verify", "garbage"]) == 1


def test_refresh(secret_env, capsys):
    token = _issue(capsys, "alice", "--claim", "role=USER")
    assert main(["refresh", token]) == 0
    refreshed = capsys.readouterr().out.strip()
    main(["inspect", refreshed])
    assert json.loads(capsys.readouterr().out)["role"] == "USER"


def test_inspect_bad_token_reports_error(secret_env, capsys):
    assert main(["inspect", "a.b.c"]) == 1
    assert "Token error" in capsys.readouterr().err


def test_issue_bad_expiration(secret_env, capsys):
    assert main(["issue", "alice", "--expires-ms", "0"]) == 1
    assert "expiration_millis" in capsys.readouterr().err


def test_configuration_error_exit_code(monkeypatch, capsys):
    monkeypatch.setenv("JWT_SHORT_SECRET_POLICY", "reject")
    assert main(["issue", "alice"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_claim_argument_format():
    parser = create_parser()
    args = parser.parse_args(["issue", "alice", "--claim", "a=b=c", "--claim", "empty="])
    assert dict(args.claim) == {"a": "b=c", "empty": ""}
    with pytest.raises(SystemExit):
        parser.parse_args(["issue", "alice", "--claim", "novalue"])


def test_command_required():
    with pytest.raises(SystemExit):
        create_parser().parse_args([])
