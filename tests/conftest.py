"""
Shared pytest fixtures.

Tests never touch the network or launch a browser: providers are scripted
fakes and backoff sleeps are recorded instead of awaited.
"""
import sys
from pathlib import Path

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.fakes import PNG_BYTES, RecordingSleep  # noqa: E402


ENV_NAMES = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "VISION_PROVIDER",
    "VISION_MODEL",
    "VISION_TIMEOUT",
    "VISION_MAX_RETRIES",
    "VISION_RETRY_DELAY",
)


@pytest.fixture
def png_file(tmp_path) -> Path:
    path = tmp_path / "screenshot.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clean_env(tmp_path, monkeypatch) -> Path:
    """
    Isolate configuration from the developer's machine.

    Clears every variable load_config reads, points HOME at an empty
    directory and runs the test from an empty working directory. Values
    that load_dotenv writes during the test are rolled back afterwards.
    """
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir
