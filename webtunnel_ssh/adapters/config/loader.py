"""
Configuration loader with priority: -D defines > env > config files > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional, Iterable

from ...core.constants import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_FILES
from ...core.exceptions import ConfigError

_TRUE_VALUES = ("true", "yes", "on", "1")
_FALSE_VALUES = ("false", "no", "off", "0")


class PropertyConfig:
    """Flat property store with dotted keys and typed getters"""

    def __init__(self, properties: Optional[Dict[str, str]] = None):
        self._properties: Dict[str, str] = dict(properties or {})

    def set_string(self, name: str, value: str) -> None:
        self._properties[name] = value

    def update(self, properties: Dict[str, str]) -> None:
        self._properties.update(properties)

    def define(self, definition: str) -> None:
        """Apply a ``name=value`` definition; a bare ``name`` sets an empty value"""
        name, _, value = definition.partition("=")
        name = name.strip()
        if not name:
            raise ConfigError(f"Invalid property definition: '{definition}'")
        self.set_string(name, value)

    def get_string(self, name: str, default: str = "") -> str:
        return self._properties.get(name, default)

    def get_int(self, name: str, default: int) -> int:
        value = self._properties.get(name)
        if value is None or value.strip() == "":
            return default
        try:
            return int(value.strip())
        except ValueError as e:
            raise ConfigError(f"Property {name} must be an integer, got '{value}'") from e

    def get_bool(self, name: str, default: bool) -> bool:
        value = self._properties.get(name)
        if value is None or value.strip() == "":
            return default
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError(f"Property {name} must be a boolean, got '{value}'")


class ConfigLoader:
    """Configuration loader with priority support"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir or DEFAULT_CONFIG_DIR).expanduser()

    def load_toml(self, path: Path) -> Dict[str, str]:
        """Load TOML configuration file, flattening tables into dotted keys"""
        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse TOML configuration {path}: {e}") from e
        return self._flatten(data)

    def load_properties(self, path: Path) -> Dict[str, str]:
        """Load a Java-style .properties file"""
        properties: Dict[str, str] = {}
        pending = ""
        for raw_line in path.read_text(encoding='utf-8').splitlines():
            line = pending + raw_line.strip()
            pending = ""
            if not line or line[0] in "#!":
                continue
            if line.endswith("\\"):
                pending = line[:-1]
                continue
            properties.update(self._parse_property(line))
        if pending:
            properties.update(self._parse_property(pending))
        return properties

    def _parse_property(self, line: str) -> Dict[str, str]:
        positions = [pos for pos in (line.find("="), line.find(":")) if pos >= 0]
        if not positions:
            return {line.strip(): ""}
        pos = min(positions)
        return {line[:pos].strip(): line[pos + 1:].strip()}

    def load_file(self, path: Path) -> Dict[str, str]:
        """
        Load a configuration file, choosing the format by extension.

        Raises:
            ConfigError: If the file is missing, unreadable or of unknown format
        """
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        try:
            if suffix == ".toml":
                return self.load_toml(path)
            if suffix in (".properties", ".conf", ""):
                return self.load_properties(path)
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
        raise ConfigError(f"Unsupported configuration file format: {path}")

    def load_env(self) -> Dict[str, str]:
        """Load configuration from environment variables"""
        config = {}

        # Map environment variables to config keys
        env_mappings = {
            "WEBTUNNEL_USERNAME": "webtunnel.username",
            "WEBTUNNEL_PASSWORD": "webtunnel.password",
            "WEBTUNNEL_CONNECT_TIMEOUT": "webtunnel.connectTimeout",
            "WEBTUNNEL_REMOTE_TIMEOUT": "webtunnel.remoteTimeout",
            "WEBTUNNEL_LOCAL_TIMEOUT": "webtunnel.localTimeout",
            "WEBTUNNEL_SSH_EXECUTABLE": "ssh.executable",
            "WEBTUNNEL_TLS_ACCEPT_UNKNOWN_CERTIFICATE": "tls.acceptUnknownCertificate",
            "WEBTUNNEL_TLS_CA_LOCATION": "tls.caLocation",
        }

        for env_key, config_key in env_mappings.items():
            value = os.getenv(env_key)
            if value:
                config[config_key] = value

        return config

    def _flatten(self, data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
        """Flatten nested tables into dotted keys with string values"""
        result: Dict[str, str] = {}

        for key, value in data.items():
            name = f"{prefix}{key}"
            if isinstance(value, dict):
                result.update(self._flatten(value, f"{name}."))
            elif isinstance(value, bool):
                result[name] = "true" if value else "false"
            elif isinstance(value, list):
                result[name] = ",".join(str(item) for item in value)
            else:
                result[name] = str(value)

        return result

    def default_files(self) -> list[Path]:
        """Default configuration files that exist"""
        return [
            self.config_dir / name
            for name in DEFAULT_CONFIG_FILES
            if (self.config_dir / name).is_file()
        ]

    def load(
        self,
        config_files: Iterable[Path] = (),
        defines: Iterable[str] = (),
        use_env: bool = True,
        use_defaults: bool = True,
    ) -> PropertyConfig:
        """
        Load configuration with priority: defines > env > config files > default files

        Args:
            config_files: Additional configuration files, later files win
            defines: ``name=value`` definitions
            use_env: Whether to load from environment variables
            use_defaults: Whether to load the default configuration files

        Returns:
            Merged property configuration
        """
        config = PropertyConfig()

        # 1. Default files, then explicit files in order
        if use_defaults:
            for path in self.default_files():
                config.update(self.load_file(path))
        for path in config_files:
            config.update(self.load_file(Path(path)))

        # 2. Environment variables
        if use_env:
            config.update(self.load_env())

        # 3. Definitions (highest priority)
        for definition in defines:
            config.define(definition)

        return config
