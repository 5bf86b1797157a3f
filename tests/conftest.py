"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
import random
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure src/ is on the import path (for local imports without installing as package)
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from nova_chat.responder import Responder  # noqa: E402
from nova_chat.server import create_app  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the root directory of the project."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Shipped default config."""
    return project_root / "config" / "default.yaml"


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run with a clean environment (no leftover vars)."""
    monkeypatch.delenv("NOVA_CHAT_CONFIG", raising=False)
    for var in list(os.environ):
        if var.startswith("NOVA_CHAT__"):
            monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def seeded_responder() -> Responder:
    """Responder whose fallback follow-up is reproducible."""
    return Responder(rng=random.Random(1234))


@pytest.fixture
def client(clean_env, config_path: Path) -> TestClient:
    return TestClient(create_app(str(config_path)))
