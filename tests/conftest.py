from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from key_beacon.config import (
    ENV_FALLBACK_KEY,
    ENV_PUBLIC_KEY,
    ENV_PUBLIC_KEY_BASE64,
    ENV_PUBLIC_KEY_FILE,
)
from key_beacon.main import create_app

SAMPLE_PEM = "-----BEGIN PUBLIC KEY-----\nABC\n-----END PUBLIC KEY-----"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without any key configuration or timeout override."""
    for name in (
        ENV_PUBLIC_KEY,
        ENV_PUBLIC_KEY_BASE64,
        ENV_PUBLIC_KEY_FILE,
        ENV_FALLBACK_KEY,
        "PARTNER_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(create_app()) as c:
        yield c
