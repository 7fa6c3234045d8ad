"""Configuration management with environment variable loading and runner defaults."""

import os
from typing import Optional
from pathlib import Path


def load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    if key not in os.environ:  # Don't override existing env vars
                        os.environ[key] = value


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable with optional default."""
    return os.environ.get(name, default)


def get_bool_env(name: str, default: bool) -> bool:
    """Interpret 1/true/yes/on (any case) as True."""
    value = get_env(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Load .env file on import
load_env_file()

# Core Configuration Constants
DEFAULT_OUT_DIR = "./harness_runs"
"""str: Default directory for run results and failure artifacts."""

DEFAULT_WORKERS = 2
"""int: Default concurrency degree when neither CLI nor env sets one."""

DEFAULT_BROWSER = "chromium"
"""str: Browser launched when no browser kind is configured."""

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

DEFAULT_VIEWPORT = {"width": 1280, "height": 720}

ENV_WORKERS = "HARNESS_WORKERS"
ENV_BROWSER = "HARNESS_BROWSER"
ENV_IMPLICIT_WAIT_MS = "HARNESS_IMPLICIT_WAIT_MS"
ENV_WINDOW_STATE = "HARNESS_WINDOW_STATE"
ENV_HEADLESS = "HARNESS_HEADLESS"

# Session opening retry
SESSION_OPEN_ATTEMPTS = 3
SESSION_OPEN_BASE_DELAY = 0.5
