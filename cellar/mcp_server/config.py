"""
MCP server configuration.

Loads environment variables (from a .env file or the system environment):
  - CELLAR_API_URL:  base URL of the cellar backend (required).
  - USER_AUTH_TOKEN: API token of the user whose cellar is exposed. Required
    over stdio; over HTTP each request may bring its own bearer token.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


@dataclass(frozen=True)
class Config:
    api_url: str
    user_auth_token: Optional[str]


def load_config(require_token: bool = True) -> Config:
    """
    Read the configuration from the environment.

    Raises:
        ValueError: If a required variable is missing.
    """
    api_url = os.getenv("CELLAR_API_URL", "").strip().rstrip("/")
    token = os.getenv("USER_AUTH_TOKEN", "").strip() or None

    if not api_url:
        raise ValueError("CELLAR_API_URL environment variable is required")
    if require_token and not token:
        raise ValueError("USER_AUTH_TOKEN environment variable is required")

    return Config(api_url=api_url, user_auth_token=token)
