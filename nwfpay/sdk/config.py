"""Configuration management for NWF Pay.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - data_dir: where payroll records and rendered paystubs are stored
   - profile: path to profile.yaml (optional, if not colocated)
   - chromium_path: headless browser used for HTML-to-PDF paystubs
   - default_format: paystub renderer used when none is requested

2. profile.yaml - Employer configuration
   - employer: company block printed on every paystub
   - certification: metadata stamped on certified documents
   - verification: base URL printed next to the verification code
   - documents: file name prefix for delivered paystubs
   - tax: default rates and per-jurisdiction overrides

Config directory resolution:
1. NWF_PAY_CONFIG_PATH environment variable (if set)
2. ~/.config/nwf-pay/ (XDG_CONFIG_HOME fallback)

Data path resolution:
1. settings.json "data_dir" key
2. XDG_DATA_HOME/nwf-pay/ or ~/.local/share/nwf-pay/
"""

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schemas import ProfileModel


APP_NAME = "nwf-pay"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"


class ProfileValidationError(Exception):
    """Raised when profile.yaml exists but does not match the schema."""

    def __init__(self, path: Path, errors: list):
        self.path = path
        self.errors = errors
        error_str = "\n  ! ".join(errors)
        super().__init__(
            f"Profile has validation errors:\n\n"
            f"  ! {error_str}\n\n"
            f"Profile: {path}"
        )


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. NWF_PAY_CONFIG_PATH environment variable
    2. ~/.config/nwf-pay/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("NWF_PAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json."""
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path() -> Path:
    """Get the path to profile.yaml.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory
    """
    custom_profile = get_setting("profile")
    if custom_profile:
        return Path(custom_profile).expanduser()
    return get_config_dir() / PROFILE_FILENAME


def load_profile_data() -> dict:
    """Load the raw profile dictionary (empty dict if no profile exists)."""
    profile_path = get_profile_path()

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def load_profile() -> ProfileModel:
    """Load and validate profile.yaml.

    A missing profile yields the built-in defaults.

    Raises:
        ProfileValidationError: If the profile has unknown keys or bad values
    """
    data = load_profile_data()
    try:
        return ProfileModel.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ProfileValidationError(get_profile_path(), errors) from e


def get_data_path() -> Path:
    """Get the data directory path.

    Uses settings.json "data_dir" when configured, otherwise
    XDG_DATA_HOME/nwf-pay/. Created if it doesn't exist.
    """
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path
