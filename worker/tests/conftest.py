# worker/tests/conftest.py
from __future__ import annotations

# Import/bootstrap so "import worker.app" works when running pytest from repo root
import os
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

TESTS_DIR = Path(__file__).resolve().parent  # .../worker/tests
WORKER_DIR = TESTS_DIR.parent  # .../worker
REPO_ROOT = WORKER_DIR.parent  # repo root

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# Fast, deterministic test defaults: fake key, no startup probe, scratch dirs.
_SCRATCH = Path(tempfile.mkdtemp(prefix="pixeltag-tests-"))
os.environ.setdefault("OPENAI_API_KEY", "sk-test-0000000000000000")
os.environ.setdefault("STARTUP_PROBE", "0")
os.environ.setdefault("UPLOAD_DIR", str(_SCRATCH / "uploads"))
os.environ.setdefault("LOG_DIR", str(_SCRATCH / "logs"))


def chat_response(content):
    """Shape-compatible stand-in for an openai ChatCompletion."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_client():
    client = Mock()
    client.chat.completions.create.return_value = chat_response(
        '{"description": "a cat", "tags": ["cat", "animal"]}'
    )
    return client


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    from worker.app.config import settings

    d = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(d))
    return d
