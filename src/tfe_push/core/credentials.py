from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional


def get_credentials_path() -> Path:
    credentials_file = os.getenv("TF_CLI_CREDENTIALS_FILE")
    if credentials_file:
        return Path(credentials_file).expanduser()

    return Path.home() / ".terraform.d" / "credentials.tfrc.json"


def _read_credentials() -> dict:
    path = get_credentials_path()
    if not path.exists():
        return {}

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return {}

    credentials = data.get("credentials") if isinstance(data, dict) else None
    return credentials if isinstance(credentials, dict) else {}


def get_api_token(hostname: str) -> Optional[str]:
    token = os.getenv("TFE_TOKEN")
    if token and token.strip():
        return token.strip()

    entry = _read_credentials().get(hostname)
    if isinstance(entry, dict):
        stored = entry.get("token")
        if isinstance(stored, str) and stored.strip():
            return stored.strip()

    return None
