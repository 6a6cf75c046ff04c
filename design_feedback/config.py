"""
Configuration Management

Loads configuration from .env files and the environment, and resolves the
API key for the selected provider (flag, environment, config file, prompt).
"""

import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import Config


logger = logging.getLogger(__name__)

CONFIG_DIR = ".design-feedback"
CONFIG_FILE = "config.json"


def default_config_path() -> Path:
    return Path.home() / CONFIG_DIR / CONFIG_FILE


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load configuration from .env file and environment variables.

    Searches for .env file in:
    1. Provided env_file path
    2. Current directory
    3. User's home directory

    Environment variables already set take precedence over .env values.

    Args:
        env_file: Optional path to .env file

    Returns:
        Config object with all settings

    Raises:
        ConfigurationError: If a value is out of range or malformed
    """
    if env_file and env_file.exists():
        load_dotenv(env_file)
    elif Path(".env").exists():
        load_dotenv(".env")
    elif (Path.home() / ".env").exists():
        load_dotenv(Path.home() / ".env")

    values = {
        "openai_api_key": os.getenv("OPENAI_API_KEY"),
        "anthropic_api_key": os.getenv("ANTHROPIC_API_KEY"),
        "vision_provider": os.getenv("VISION_PROVIDER", "openai").lower(),
        "vision_model": os.getenv("VISION_MODEL"),
        "request_timeout": os.getenv("VISION_TIMEOUT", "30"),
        "max_retries": os.getenv("VISION_MAX_RETRIES", "3"),
        "retry_delay": os.getenv("VISION_RETRY_DELAY", "1.0"),
    }

    try:
        return Config(**values)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise ConfigurationError(
            f"Invalid configuration value(s): {fields}",
            hint="Check VISION_* settings in your environment or .env file."
        ) from e


def read_config_file(config_path: Optional[Path] = None) -> dict:
    """
    Read the saved configuration file.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigurationError: If the file is unreadable or not a JSON object
    """
    path = config_path or default_config_path()
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            f"Unable to read configuration file: {path}",
            hint="Please ensure you have proper permissions."
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid configuration file format: {path}",
            hint="The file must contain a JSON object."
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration file format: {path}",
            hint="The file must contain a JSON object."
        )
    return data


def save_config_file(values: dict, config_path: Optional[Path] = None) -> Path:
    """Merge values into the saved configuration file"""
    path = config_path or default_config_path()
    data = read_config_file(path)
    data.update(values)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        path.chmod(0o600)
    except OSError as e:
        raise ConfigurationError(f"Failed to save configuration: {e}") from e

    logger.debug("Saved configuration to %s", path)
    return path


def _prompt_for_key(provider: str) -> str:
    return click.prompt(
        f"Enter your {provider} API key",
        hide_input=True,
        default="",
        show_default=False
    )


def resolve_api_key(
    provider: str,
    config: Config,
    explicit_key: Optional[str] = None,
    config_path: Optional[Path] = None,
    interactive: bool = True,
    prompt: Callable[[str], str] = _prompt_for_key
) -> str:
    """
    Find the API key for a provider.

    Order: explicit flag, environment/.env, saved config file, then an
    interactive prompt whose answer is saved for next time.

    Args:
        provider: "openai" or "anthropic"
        config: Loaded configuration
        explicit_key: Key passed on the command line
        config_path: Saved configuration location (default ~/.design-feedback/config.json)
        interactive: Whether prompting is allowed
        prompt: Function asking the user for the key

    Returns:
        The API key

    Raises:
        ConfigurationError: If no key can be found
    """
    if explicit_key and explicit_key.strip():
        return explicit_key.strip()

    configured = config.api_key_for(provider)
    if configured:
        return configured

    field = f"{provider}_api_key"
    saved = read_config_file(config_path).get(field)
    if isinstance(saved, str) and saved.strip():
        return saved.strip()

    env_name = f"{provider.upper()}_API_KEY"
    if not interactive:
        raise ConfigurationError(
            f"{provider} API key not found.",
            hint=f"Set the {env_name} environment variable or use --api-key."
        )

    click.echo(f"No {provider} API key found.", err=True)
    click.echo(
        f"Set {env_name}, pass --api-key, or enter it now to save it to the config file.",
        err=True
    )
    answer = (prompt(provider) or "").strip()
    if not answer:
        raise ConfigurationError(f"{provider} API key is required to run this tool")

    path = save_config_file({field: answer}, config_path)
    click.echo(f"API key saved to {path}", err=True)
    return answer
