"""Configuration management module.

Connection profiles live in ~/.zosctl/config.toml:

    default_profile = "lpar1"

    [profiles.lpar1]
    host = "mainframe.example.com"
    port = 443
    user = "IBMUSER"
    reject_unauthorized = true

Secrets are never written there. Passwords come from --password or
ZOSCTL_PASSWORD; tokens from --token-value, ZOSCTL_TOKEN_VALUE or the token
file written by `zosctl auth login` (~/.zosctl/tokens/<profile>.toml).

Security:
- Config and token file permissions: 0600 (owner read/write only)
- Config directory permissions: 0700
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli
import tomlkit

from zosctl.errors import ZosError

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "default"
ENV_PREFIX = "ZOSCTL_"

# Keys a profile may hold on disk, with the type each is coerced to
PROFILE_KEYS: dict[str, type] = {
    "host": str,
    "port": int,
    "user": str,
    "protocol": str,
    "base_path": str,
    "reject_unauthorized": bool,
    "token_type": str,
}
SECRET_KEYS = ("password", "token_value")


class ConfigError(ZosError):
    """Raised when configuration operations fail."""

    pass


@dataclass
class ProfileConfig:
    """Resolved connection properties for one z/OSMF instance."""

    name: str = DEFAULT_PROFILE_NAME
    host: str | None = None
    port: int = 443
    user: str | None = None
    password: str | None = None
    protocol: str = "https"
    base_path: str | None = None
    reject_unauthorized: bool = True
    token_type: str | None = None
    token_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Persistable properties, excluding secrets and None values."""
        return {
            key: getattr(self, key)
            for key in PROFILE_KEYS
            if getattr(self, key) is not None
        }


@dataclass
class ZosctlConfig:
    """Contents of config.toml."""

    default_profile: str | None = None
    profiles: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ZosctlConfig":
        return cls(
            default_profile=data.get("default_profile"),
            profiles={name: dict(values) for name, values in data.get("profiles", {}).items()},
        )


def coerce_value(key: str, value: Any) -> Any:
    """Coerce a string from the command line or environment to the key's type."""
    target = PROFILE_KEYS.get(key, str)
    if value is None or isinstance(value, target):
        return value
    if target is bool:
        text = str(value).strip().lower()
        if text in ("true", "yes", "1", "on"):
            return True
        if text in ("false", "no", "0", "off"):
            return False
        raise ConfigError(f"Invalid boolean value for {key}: {value}")
    if target is int:
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(f"Invalid integer value for {key}: {value}") from e
    return str(value)


class ConfigManager:
    """Manage the zosctl configuration file and token store."""

    @classmethod
    def get_config_dir(cls) -> Path:
        override = os.environ.get("ZOSCTL_CONFIG_DIR")
        if override:
            return Path(override).expanduser()
        return Path.home() / ".zosctl"

    @classmethod
    def get_config_path(cls) -> Path:
        return cls.get_config_dir() / "config.toml"

    @classmethod
    def get_token_path(cls, profile_name: str) -> Path:
        return cls.get_config_dir() / "tokens" / f"{profile_name}.toml"

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Ensure config directory exists with secure permissions.

        Raises:
            ConfigError: If directory creation fails
        """
        config_dir = cls.get_config_dir()
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(config_dir, 0o700)
            return config_dir
        except OSError as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

    @classmethod
    def _read_toml(cls, path: Path) -> dict[str, Any]:
        mode = path.stat().st_mode & 0o777
        if mode & 0o077:
            logger.warning(f"{path.name} has insecure permissions: {oct(mode)}. Fixing to 0600...")
            os.chmod(path, 0o600)
        with open(path, "rb") as f:
            return tomli.load(f)

    @classmethod
    def _write_toml(cls, path: Path, doc: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")
        try:
            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)
            os.chmod(temp_path, 0o600)
            temp_path.replace(path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to write {path}: {e}") from e

    @classmethod
    def load_config(cls) -> ZosctlConfig:
        """Load configuration from file, or an empty config if none exists.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        config_path = cls.get_config_path()
        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ZosctlConfig()
        try:
            data = cls._read_toml(config_path)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e
        logger.debug(f"Loaded config from: {config_path}")
        return ZosctlConfig.from_dict(data)

    @classmethod
    def save_config(cls, config: ZosctlConfig) -> None:
        """Save configuration, preserving comments in an existing file."""
        cls.ensure_config_dir()
        config_path = cls.get_config_path()

        if config_path.exists():
            with open(config_path) as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()

        if config.default_profile:
            doc["default_profile"] = config.default_profile
        elif "default_profile" in doc:
            del doc["default_profile"]

        profiles = tomlkit.table()
        for name, values in config.profiles.items():
            table = tomlkit.table()
            for key, value in values.items():
                if key in SECRET_KEYS:
                    continue
                table[key] = value
            profiles[name] = table
        doc["profiles"] = profiles

        cls._write_toml(config_path, doc)
        logger.debug(f"Saved config to: {config_path}")

    @classmethod
    def list_profiles(cls) -> list[str]:
        return sorted(cls.load_config().profiles)

    @classmethod
    def get_profile(cls, name: str | None = None) -> ProfileConfig:
        """Return a stored profile, without environment or flag overrides.

        Args:
            name: Profile name; the default profile when omitted

        Raises:
            ConfigError: If a named profile does not exist
        """
        config = cls.load_config()
        profile_name = name or config.default_profile or DEFAULT_PROFILE_NAME
        values = config.profiles.get(profile_name)
        if values is None:
            if name:
                raise ConfigError(
                    f"Profile '{name}' not found. Create it with: zosctl config init --profile {name}"
                )
            return ProfileConfig(name=profile_name)

        known = {f.name for f in fields(ProfileConfig)}
        kwargs = {
            key: coerce_value(key, value)
            for key, value in values.items()
            if key in known and key not in SECRET_KEYS
        }
        return ProfileConfig(name=profile_name, **kwargs)

    @classmethod
    def set_profile_values(cls, name: str, **values: Any) -> ProfileConfig:
        """Create or update a profile.

        Raises:
            ConfigError: If a key is unknown or is a secret
        """
        for key in values:
            if key in SECRET_KEYS:
                raise ConfigError(
                    f"'{key}' is not stored in the config file. "
                    f"Use ZOSCTL_{key.upper()} or the --{key.replace('_', '-')} option."
                )
            if key not in PROFILE_KEYS:
                raise ConfigError(
                    f"Unknown profile property: {key}. Valid properties: {', '.join(PROFILE_KEYS)}"
                )

        config = cls.load_config()
        profile = config.profiles.setdefault(name, {})
        for key, value in values.items():
            if value is None:
                profile.pop(key, None)
            else:
                profile[key] = coerce_value(key, value)
        if not config.default_profile:
            config.default_profile = name
        cls.save_config(config)
        return cls.get_profile(name)

    @classmethod
    def remove_profile(cls, name: str) -> None:
        config = cls.load_config()
        if name not in config.profiles:
            raise ConfigError(f"Profile '{name}' not found")
        del config.profiles[name]
        if config.default_profile == name:
            config.default_profile = next(iter(config.profiles), None)
        cls.save_config(config)
        cls.delete_token(name)

    @classmethod
    def set_default_profile(cls, name: str) -> None:
        config = cls.load_config()
        if name not in config.profiles:
            raise ConfigError(f"Profile '{name}' not found")
        config.default_profile = name
        cls.save_config(config)

    # -- token store -----------------------------------------------------

    @classmethod
    def save_token(cls, profile_name: str, token_type: str, token_value: str) -> Path:
        cls.ensure_config_dir()
        doc = tomlkit.document()
        doc["token_type"] = token_type
        doc["token_value"] = token_value
        path = cls.get_token_path(profile_name)
        cls._write_toml(path, doc)
        logger.debug(f"Stored token for profile {profile_name}")
        return path

    @classmethod
    def load_token(cls, profile_name: str) -> tuple[str, str] | None:
        path = cls.get_token_path(profile_name)
        if not path.exists():
            return None
        try:
            data = cls._read_toml(path)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load token for profile {profile_name}: {e}") from e
        if not data.get("token_type") or not data.get("token_value"):
            return None
        return data["token_type"], data["token_value"]

    @classmethod
    def delete_token(cls, profile_name: str) -> bool:
        path = cls.get_token_path(profile_name)
        if path.exists():
            path.unlink()
            return True
        return False

    # -- resolution ------------------------------------------------------

    @classmethod
    def resolve_profile(cls, profile_name: str | None = None, **cli_values: Any) -> ProfileConfig:
        """Resolve connection properties.

        Precedence per property: explicit CLI value > ZOSCTL_<PROP>
        environment variable > stored profile (and its token file) > default.

        Args:
            profile_name: Profile to start from (default profile when omitted)
            **cli_values: Values given on the command line; None means not given
        """
        profile_name = profile_name or os.environ.get(f"{ENV_PREFIX}PROFILE")
        profile = cls.get_profile(profile_name)

        stored_token = cls.load_token(profile.name)
        if stored_token and not profile.token_value:
            profile.token_type = profile.token_type or stored_token[0]
            profile.token_value = stored_token[1]

        overridden = set()
        for key in list(PROFILE_KEYS) + list(SECRET_KEYS):
            env_value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
            if env_value is not None and env_value != "":
                setattr(profile, key, coerce_value(key, env_value))
                overridden.add(key)
            cli_value = cli_values.get(key)
            if cli_value is not None:
                setattr(profile, key, coerce_value(key, cli_value))
                overridden.add(key)

        # Credentials given explicitly outrank a token held by the profile
        if overridden & {"user", "password"} and "token_value" not in overridden:
            logger.debug("Explicit credentials given; ignoring the profile's token")
            profile.token_value = None

        return profile
