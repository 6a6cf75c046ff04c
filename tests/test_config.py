"""
Tests for config.py: .env loading and API key resolution.

Every test runs under the `clean_env` fixture: no inherited VISION_* or
*_API_KEY variables, an empty HOME and an empty working directory.
"""
import json

import pytest

from design_feedback.config import (
    load_config,
    read_config_file,
    resolve_api_key,
    save_config_file,
)
from design_feedback.errors import ConfigurationError
from design_feedback.models import Config


pytestmark = pytest.mark.usefixtures("clean_env")


# ── load_config ────────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_defaults(self):
        config = load_config()

        assert config.openai_api_key is None
        assert config.vision_provider == "openai"
        assert config.request_timeout == 30
        assert config.max_retries == 3
        assert config.retry_delay == 1.0

    def test_explicit_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "OPENAI_API_KEY=sk-from-file\n"
            "VISION_TIMEOUT=45\n"
            "VISION_MAX_RETRIES=1\n"
            "VISION_RETRY_DELAY=0.5\n"
        )

        config = load_config(env_file)

        assert config.openai_api_key == "sk-from-file"
        policy = config.retry_policy()
        assert policy.timeout == 45
        assert policy.max_attempts == 2
        assert policy.base_delay == 0.5

    def test_env_file_in_working_directory(self, clean_env):
        (clean_env / ".env").write_text("VISION_PROVIDER=Anthropic\nANTHROPIC_API_KEY=sk-ant\n")

        config = load_config()

        assert config.vision_provider == "anthropic"
        assert config.api_key_for("anthropic") == "sk-ant"

    def test_environment_wins_over_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / "custom.env"
        env_file.write_text("VISION_MODEL=from-file\n")
        monkeypatch.setenv("VISION_MODEL", "from-environment")

        assert load_config(env_file).vision_model == "from-environment"

    @pytest.mark.parametrize("name, value", [
        ("VISION_MAX_RETRIES", "many"),
        ("VISION_TIMEOUT", "1"),
        ("VISION_PROVIDER", "ollama"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config()


# ── Config file ────────────────────────────────────────────────────────────────

class TestConfigFile:
    def test_missing_file_is_empty(self, tmp_path):
        assert read_config_file(tmp_path / "nope.json") == {}

    def test_save_merges_values(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        path.parent.mkdir()
        path.write_text(json.dumps({"anthropic_api_key": "sk-ant"}))

        save_config_file({"openai_api_key": "sk-openai"}, path)

        assert json.loads(path.read_text()) == {
            "anthropic_api_key": "sk-ant",
            "openai_api_key": "sk-openai",
        }

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_malformed_file(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)

        with pytest.raises(ConfigurationError, match="Invalid configuration file format"):
            read_config_file(path)


# ── resolve_api_key ────────────────────────────────────────────────────────────

class TestResolveApiKey:
    def test_explicit_key_wins(self, tmp_path):
        config = Config(openai_api_key="sk-env")
        assert resolve_api_key("openai", config, explicit_key=" sk-flag ") == "sk-flag"

    def test_environment_key(self, tmp_path):
        config = Config(openai_api_key="sk-env")
        assert resolve_api_key("openai", config, config_path=tmp_path / "c.json") == "sk-env"

    def test_config_file_key(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"anthropic_api_key": "sk-ant-saved"}))

        key = resolve_api_key("anthropic", Config(), config_path=path, interactive=False)

        assert key == "sk-ant-saved"

    def test_prompted_key_is_saved(self, tmp_path):
        path = tmp_path / "dir" / "config.json"
        asked = []

        def prompt(provider):
            asked.append(provider)
            return "sk-prompted"

        key = resolve_api_key("openai", Config(), config_path=path, prompt=prompt)

        assert key == "sk-prompted"
        assert asked == ["openai"]
        assert json.loads(path.read_text()) == {"openai_api_key": "sk-prompted"}

    def test_default_location_is_under_home(self, clean_env):
        resolve_api_key("openai", Config(), prompt=lambda provider: "sk-home")

        home_config = clean_env.parent / "home" / ".design-feedback" / "config.json"
        assert json.loads(home_config.read_text()) == {"openai_api_key": "sk-home"}

    def test_empty_prompt_answer(self, tmp_path):
        with pytest.raises(ConfigurationError, match="API key is required"):
            resolve_api_key("openai", Config(), config_path=tmp_path / "c.json", prompt=lambda p: "  ")

    def test_non_interactive_without_key(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc:
            resolve_api_key("openai", Config(), config_path=tmp_path / "c.json", interactive=False)
        assert "OPENAI_API_KEY" in exc.value.hint
