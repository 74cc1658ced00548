"""Verify that the add-on's environment configuration is complete and unchanged.

Commands:

``check``
    Load the ``.env`` file and instantiate ``AppSettings`` so a missing
    ``APP_SALT``, ``CLIENT_SECRET`` or malformed ``APP_HOMEPAGE`` is reported
    before the platform starts sending webhooks.
``describe``
    Same as ``check``, then print the effective settings with every secret
    masked.
``record`` / ``verify``
    Store, then later compare, a SHA256 checksum of the ``.env`` file to catch
    unexpected edits.

Example::

    python -m scripts.check_env record --env-file /srv/addon/.env \
        --hash-file /srv/addon/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import json
import sys
from pathlib import Path
from typing import Callable

from dotenv import dotenv_values
from pydantic import ValidationError

from app.core.config import (
    AppSettings,
    DatabaseSettings,
    MarketplaceSettings,
    SecuritySettings,
)

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5

_SECRET_FIELDS = {
    "app_password",
    "app_salt",
    "client_secret",
    "token_encryption_secret",
}


def _load_settings(env_file: Path) -> AppSettings:
    if not env_file.exists():
        raise FileNotFoundError(f"Environment file {env_file} does not exist.")
    # The checked file wins over the process environment and ./.env is ignored.
    values = {
        key: value
        for key, value in dotenv_values(env_file).items()
        if value is not None
    }
    return AppSettings(  # type: ignore[call-arg]
        _env_file=None,
        marketplace=MarketplaceSettings(_env_file=None, **values),
        security=SecuritySettings(_env_file=None, **values),
        database=DatabaseSettings(_env_file=None, **values),
        **values,
    )


def _mask(values: dict) -> dict:
    masked = {}
    for key, value in values.items():
        if isinstance(value, dict):
            masked[key] = _mask(value)
        elif key in _SECRET_FIELDS and value:
            masked[key] = "****"
        else:
            masked[key] = value
    return masked


def _describe(settings: AppSettings) -> int:
    print(json.dumps(_mask(settings.model_dump(mode="json")), indent=2))
    if not settings.security.token_encryption_secret:
        print(
            "TOKEN_ENCRYPTION_SECRET is unset; stored tokens are encrypted with "
            "a key derived from CLIENT_SECRET.",
            file=sys.stderr,
        )
    return EXIT_OK


def _checksum(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _record(env_file: Path, hash_file: Path) -> int:
    checksum = _checksum(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"Checksum baseline {hash_file} is missing; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _checksum(env_file)
    if expected != actual:
        print(
            f"Environment checksum mismatch (expected {expected}, got {actual}).",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR
    print("Environment checksum OK.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate add-on settings and detect .env drift."
    )
    parser.add_argument(
        "command", choices=("check", "describe", "record", "verify")
    )
    parser.add_argument("--env-file", default=".env", type=Path)
    parser.add_argument(
        "--hash-file",
        type=Path,
        help="Checksum baseline location (required for record and verify).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command in ("record", "verify") and args.hash_file is None:
        parser.error(f"--hash-file is required for {args.command}")

    env_file: Path = args.env_file
    try:
        settings = _load_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed:\n" f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    handlers: dict[str, Callable[[], int]] = {
        "check": lambda: EXIT_OK,
        "describe": lambda: _describe(settings),
        "record": lambda: _record(env_file, args.hash_file),
        "verify": lambda: _verify(env_file, args.hash_file),
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
