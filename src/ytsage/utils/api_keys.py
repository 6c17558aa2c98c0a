"""API key validation utilities.

Validates AI provider keys from configuration or the environment so that
configuration mistakes surface as classified errors before any call is made.
"""

import os
import re
from typing import Literal

from ytsage.utils.errors import APIKeyError

Provider = Literal["gemini", "claude"]

# Environment variables checked per provider, in order
PROVIDER_ENV_VARS: dict[str, tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "claude": ("ANTHROPIC_API_KEY",),
}

_KEY_PATTERNS: dict[str, tuple[str, str]] = {
    "gemini": (r"^AIza[A-Za-z0-9_-]+$", "start with 'AIza'"),
    "claude": (r"^sk-ant-[A-Za-z0-9_-]+$", "start with 'sk-ant-'"),
}


def validate_api_key(key: str | None, provider: Provider, key_name: str) -> str:
    """Validate API key format and return the cleaned key.

    Args:
        key: The API key to validate (may be None)
        provider: The API provider name
        key_name: Environment variable name (for error messages)

    Returns:
        Validated and stripped API key

    Raises:
        APIKeyError: If key is missing, empty, or malformed
    """
    if key is None or not key.strip():
        raise APIKeyError(
            f"{provider.title()} API key is required",
            remediations=(
                f"Set the {key_name} environment variable",
                f"Example: export {key_name}='your-api-key-here'",
            ),
        )

    stripped = key.strip()
    if (stripped.startswith('"') and stripped.endswith('"')) or (
        stripped.startswith("'") and stripped.endswith("'")
    ):
        raise APIKeyError(
            f"{provider.title()} API key should not be quoted",
            remediations=(f"Remove quotes from the {key_name} environment variable",),
        )

    if any(char in key for char in ["\n", "\r", "\0", "\t"]):
        raise APIKeyError(
            f"{provider.title()} API key contains invalid characters",
            remediations=(f"Check your {key_name} environment variable for control characters",),
        )

    if len(stripped) < 20:
        raise APIKeyError(
            f"{provider.title()} API key appears invalid (too short)",
            remediations=(
                f"Expected at least 20 characters, got {len(stripped)}",
                f"Check your {key_name} environment variable",
            ),
        )

    pattern, hint = _KEY_PATTERNS[provider]
    if not re.match(pattern, stripped):
        raise APIKeyError(
            f"{provider.title()} API key format appears invalid",
            remediations=(
                f"{provider.title()} keys typically {hint}",
                f"Check your {key_name} environment variable",
            ),
        )

    return stripped


def resolve_api_key(provider: Provider, configured: str | None = None) -> str:
    """Return a validated key from config, falling back to the environment.

    Raises:
        APIKeyError: If no valid key is available
    """
    env_vars = PROVIDER_ENV_VARS[provider]
    if configured:
        return validate_api_key(configured, provider, env_vars[0])

    for env_var in env_vars:
        value = os.environ.get(env_var)
        if value:
            return validate_api_key(value, provider, env_var)

    return validate_api_key(None, provider, env_vars[0])
