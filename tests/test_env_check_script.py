"""Tests for the environment validation and drift detection script."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from scripts import check_env

REQUIRED_ENV_KEYS = [
    "APP_SLUG",
    "APP_PASSWORD",
    "APP_SALT",
    "CLIENT_SECRET",
    "APP_HOMEPAGE",
    "TOKEN_ENCRYPTION_SECRET",
]

VALID_ENV = {
    "APP_SLUG": "sample_app",
    "APP_PASSWORD": "platform-password",
    "APP_SALT": "0123456789abcdef0123456789abcdef",
    "CLIENT_SECRET": "client-secret",
    "APP_HOMEPAGE": "https://frontend.example.com/login",
    "TOKEN_ENCRYPTION_SECRET": "encryption-secret",
}


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def isolated_environ():
    """Start every test without marketplace variables in ``os.environ``."""
    snapshot = dict(os.environ)
    for key in REQUIRED_ENV_KEYS:
        os.environ.pop(key, None)
    yield
    os.environ.clear()
    os.environ.update(snapshot)


@pytest.mark.parametrize("command", ["record", "verify", "check", "describe"])
def test_main_requires_existing_env_file(tmp_path: Path, command: str) -> None:
    env_file = tmp_path / ".missing-env"
    hash_file = tmp_path / ".env.sha256"

    argv = [command, "--env-file", str(env_file)]
    if command in ("record", "verify"):
        argv.extend(["--hash-file", str(hash_file)])

    exit_code = check_env.main(argv)
    assert exit_code == check_env.EXIT_RUNTIME_ERROR


def test_hash_file_is_required_for_record(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        check_env.main(["record", "--env-file", str(tmp_path / ".env")])


def test_check_accepts_complete_env(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, **VALID_ENV)

    assert check_env.main(["check", "--env-file", str(env_file)]) == check_env.EXIT_OK


def test_record_and_verify_detects_mismatched_checksum(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    hash_file = tmp_path / ".env.sha256"
    _write_env(env_file, **VALID_ENV)

    argv = ["--env-file", str(env_file), "--hash-file", str(hash_file)]
    assert check_env.main(["record", *argv]) == check_env.EXIT_OK
    assert hash_file.read_text(encoding="utf-8").strip()

    assert check_env.main(["verify", *argv]) == check_env.EXIT_OK

    _write_env(env_file, **{**VALID_ENV, "CLIENT_SECRET": "rotated"})
    assert check_env.main(["verify", *argv]) == check_env.EXIT_CHECKSUM_ERROR


def test_verify_without_baseline_is_runtime_error(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, **VALID_ENV)

    exit_code = check_env.main(
        [
            "verify",
            "--env-file",
            str(env_file),
            "--hash-file",
            str(tmp_path / "absent.sha256"),
        ]
    )
    assert exit_code == check_env.EXIT_RUNTIME_ERROR


@pytest.mark.parametrize(
    "overrides",
    [
        {"APP_SALT": ""},
        {"CLIENT_SECRET": ""},
        {"APP_HOMEPAGE": "not a url"},
    ],
)
def test_validation_failure_for_bad_values(tmp_path: Path, overrides: dict) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, **{**VALID_ENV, **overrides})

    exit_code = check_env.main(["check", "--env-file", str(env_file)])
    assert exit_code == check_env.EXIT_VALIDATION_ERROR


def test_describe_masks_secrets(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, **VALID_ENV)

    exit_code = check_env.main(["describe", "--env-file", str(env_file)])

    assert exit_code == check_env.EXIT_OK
    described = json.loads(capsys.readouterr().out)
    assert described["marketplace"]["app_salt"] == "****"
    assert described["marketplace"]["client_secret"] == "****"
    assert described["marketplace"]["app_password"] == "****"
    assert described["marketplace"]["app_slug"] == "sample_app"
    assert described["security"]["token_encryption_secret"] == "****"


def test_process_environment_does_not_mask_file_values(tmp_path: Path) -> None:
    os.environ.update(VALID_ENV)
    env_file = tmp_path / "addon.env"
    _write_env(env_file, **{**VALID_ENV, "APP_SALT": ""})

    exit_code = check_env.main(["check", "--env-file", str(env_file)])
    assert exit_code == check_env.EXIT_VALIDATION_ERROR


def test_working_directory_env_is_ignored(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    _write_env(tmp_path / ".env", **VALID_ENV)
    checked = tmp_path / "deploy"
    checked.mkdir()
    env_file = checked / ".env"
    _write_env(env_file, **{**VALID_ENV, "CLIENT_SECRET": ""})

    exit_code = check_env.main(["check", "--env-file", str(env_file)])
    assert exit_code == check_env.EXIT_VALIDATION_ERROR


def test_describe_reports_checked_file_values(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    os.environ.update({**VALID_ENV, "APP_SLUG": "from_process"})
    env_file = tmp_path / "addon.env"
    _write_env(env_file, **VALID_ENV)

    assert check_env.main(["describe", "--env-file", str(env_file)]) == 0
    described = json.loads(capsys.readouterr().out)
    assert described["marketplace"]["app_slug"] == "sample_app"
