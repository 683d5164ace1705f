"""
Configuration management using Pydantic Settings with safe access wrapper
"""
import argparse
from pydantic_settings import BaseSettings
from typing import Dict, Optional, Any, Sequence, Tuple


class ConfigurationError(ValueError):
    """Raised when the exporter cannot start with the given settings"""
    pass


class Settings(BaseSettings):
    # Application settings
    app_name: str = "MySQLd exporter"
    version: str = "0.1.0"
    debug: bool = False

    # Database settings
    data_source_name: Optional[str] = None
    scrape_timeout: int = 10

    # Web settings
    web_listen_address: str = ":9104"
    web_telemetry_path: str = "/metrics"

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_file_max_bytes: int = 10485760
    log_file_backup_count: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"   # allow unknown env vars without error

    def validate_settings(self):
        """Validate critical settings on startup"""
        errors = []

        if not self.data_source_name:
            errors.append("couldn't find environment variable DATA_SOURCE_NAME")

        if not self.web_telemetry_path.startswith("/"):
            errors.append(f"Invalid telemetry path: {self.web_telemetry_path}")

        if self.scrape_timeout <= 0:
            errors.append("Scrape timeout must be positive")

        try:
            parse_listen_address(self.web_listen_address)
        except ConfigurationError as e:
            errors.append(str(e))

        if errors:
            raise ConfigurationError(f"Configuration errors: {'; '.join(errors)}")

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None, **overrides) -> "Settings":
        """Load settings from the environment, with command-line flags taking precedence"""
        return cls(**{**parse_flags(argv), **overrides})

    @property
    def listen_host_port(self) -> Tuple[str, int]:
        return parse_listen_address(self.web_listen_address)


# Flag names of the classic exporter, single or double dash
FLAGS = {
    "web.listen-address": ("web_listen_address", "Address to listen on for web interface and telemetry."),
    "web.telemetry-path": ("web_telemetry_path", "Path under which to expose metrics."),
}


def parse_flags(argv: Optional[Sequence[str]] = None) -> Dict[str, str]:
    """
    Parse exporter command-line flags into settings field values.

    Only flags present on the command line are returned, so unset flags
    leave environment and default values untouched.
    """
    parser = argparse.ArgumentParser(prog="mysqld-exporter")
    for flag, (field, help_text) in FLAGS.items():
        parser.add_argument(f"-{flag}", f"--{flag}", dest=field, help=help_text,
                            default=argparse.SUPPRESS)
    return vars(parser.parse_args(argv))


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` listen address.

    An empty host (``":9104"``) binds every interface. IPv6 hosts may be
    bracketed, e.g. ``"[::1]:9104"``.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigurationError(f"Invalid listen address: {address!r}")

    host = host.strip("[]") or "0.0.0.0"
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ConfigurationError(f"Invalid listen port: {port_number}")

    return host, port_number


class SafeSettings:
    """Safe wrapper for settings with fallback defaults"""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._defaults = {
            "scrape_timeout": 10,
            "web_listen_address": ":9104",
            "web_telemetry_path": "/metrics",
            "log_level": "INFO",
            "log_dir": "logs",
            "log_file_max_bytes": 10485760,
            "log_file_backup_count": 10,
            "debug": False,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Safely get setting value with fallback"""
        value = getattr(self._settings, key, None)
        if value is None:
            value = self._defaults.get(key, default)
        return value

    def __getattr__(self, key: str) -> Any:
        """Proxy attribute access with safety"""
        return self.get(key)

    @property
    def raw(self) -> Settings:
        """Get raw settings object"""
        return self._settings


# Initialize settings with safety wrapper
_raw_settings = Settings()
settings = SafeSettings(_raw_settings)
