from pathlib import Path

import platformdirs


def find_toml_config_file() -> Path | None:
    """Find the TOML configuration file for account_console.

    Searches in the following order:
    1. .account_console.toml in current directory
    2. account_console.toml in current directory
    3. config.toml in user config directory/account_console/ (platform-specific)
    """
    candidates = [
        Path(".account_console.toml").resolve(),
        Path("account_console.toml").resolve(),
        get_config_dir() / "config.toml",
    ]

    for candidate in candidates:
        if candidate.exists() and candidate.is_file():
            return candidate

    return None


def get_config_dir() -> Path:
    """Get the account_console configuration directory.

    Returns:
        Path to the account_console directory within the user config directory.
    """
    return Path(platformdirs.user_config_dir()) / "account_console"
