"""Root conftest: settings are read at import time, so the test env goes first."""
from __future__ import annotations

import os
from pathlib import Path

_ENV_FILE = Path(__file__).resolve().parent / ".env.test"

# Enough for Settings() to build when .env.test is absent.
_FALLBACKS = {
    "POSTGRES_USER": "chat",
    "POSTGRES_PASSWORD": "chat",
    "POSTGRES_DB": "community_chat_test",
    "JWT_SECRET": "test-secret-with-at-least-thirty-two-bytes!",
    "JWT_VERIFY_MODE": "hs256",
    "FANOUT_BACKEND": "local",
}


def _parse_env(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.removeprefix("export ").partition("=")
        values[key.strip()] = value.strip().strip("'\"")
    return values


for _key, _value in {
    **_FALLBACKS,
    **(_parse_env(_ENV_FILE) if _ENV_FILE.exists() else {}),
}.items():
    os.environ.setdefault(_key, _value)
