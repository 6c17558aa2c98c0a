"""Filesystem locations for ytsage configuration."""

from pathlib import Path

import platformdirs

APP_NAME = "ytsage"


def get_config_dir() -> Path:
    """Return the XDG-compliant configuration directory."""
    return Path(platformdirs.user_config_dir(APP_NAME))
