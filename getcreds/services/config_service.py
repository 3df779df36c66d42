"""
Configuration service for loading and validating client settings.
"""
import os
import configparser
from typing import Optional, Dict, Any, List
from urllib.parse import urlparse
import logging

from ..models.config import Config, ConfigValidationResult, ERROR, WARNING
from ..models.errors import ConfigurationError


DEFAULT_CONFIG_CONTENT = """# getcreds configuration file

[base]
# Comma separated issuer base URLs, tried in order
gen_cert_urls = https://keymaster1.example.com,https://keymaster2.example.com

[client]
keys_directory = ~/.ssh
key_file_prefix = getcreds
rsa_key_size = 2048
request_timeout_seconds = 5
ca_bundle_path =
request_x509 = true
save_x509_certificate = false

[app]
log_level = INFO
log_file_path =
"""


class ConfigService:
    """Service for loading and validating client configuration."""

    def __init__(self, config_path: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self._config = None
        if config_path:
            self._config = self.load_config(config_path)

    def get_config(self) -> Config:
        """
        Get the loaded configuration.

        Raises:
            ConfigurationError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigurationError("No configuration loaded. Call load_config() first.")
        return self._config

    def load_config(self, config_path: str) -> Config:
        """
        Load configuration from a property file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        config_data = self._load_config_file(config_path)
        config = self._create_config_from_data(config_data)

        validation_result = self.validate_config(config)

        if not validation_result.is_valid:
            error_summary = validation_result.summary(ERROR)
            raise ConfigurationError(f"Configuration validation failed:\n{error_summary}")

        if validation_result.has_warnings():
            warning_summary = validation_result.summary(WARNING)
            self.logger.warning(f"Configuration warnings:\n{warning_summary}")

        self._config = config
        return config

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration data from file."""
        config_parser = configparser.ConfigParser(interpolation=None)

        try:
            with open(config_path, encoding="utf-8") as f:
                config_parser.read_file(f)
        except (configparser.Error, UnicodeDecodeError, OSError) as e:
            raise ConfigurationError(f"Failed to parse configuration file: {e}") from e

        # Flatten to section.key names
        config_data = {}
        for section in config_parser.sections():
            for key, value in config_parser.items(section):
                config_data[f"{section}.{key}"] = value

        for key, value in config_parser.defaults().items():
            config_data.setdefault(key, value)

        return config_data

    def _create_config_from_data(self, config_data: Dict[str, Any]) -> Config:
        """Create Config object from configuration data."""
        config_mapping = {
            # Issuer settings
            "base.gen_cert_urls": ("cert_gen_urls", list),
            "gen_cert_urls": ("cert_gen_urls", list),

            # Client settings
            "client.keys_directory": ("keys_directory", str),
            "keys_directory": ("keys_directory", str),
            "client.key_file_prefix": ("key_file_prefix", str),
            "key_file_prefix": ("key_file_prefix", str),
            "client.rsa_key_size": ("rsa_key_size", int),
            "rsa_key_size": ("rsa_key_size", int),
            "client.request_timeout_seconds": ("request_timeout_seconds", int),
            "request_timeout_seconds": ("request_timeout_seconds", int),
            "client.ca_bundle_path": ("ca_bundle_path", str),
            "ca_bundle_path": ("ca_bundle_path", str),
            "client.request_x509": ("request_x509", bool),
            "request_x509": ("request_x509", bool),
            "client.save_x509_certificate": ("save_x509_certificate", bool),
            "save_x509_certificate": ("save_x509_certificate", bool),

            # Application settings
            "app.log_level": ("log_level", str),
            "log_level": ("log_level", str),
            "app.log_file_path": ("log_file_path", str),
            "log_file_path": ("log_file_path", str),
        }

        config_kwargs = {}

        for config_key, raw_value in config_data.items():
            if config_key not in config_mapping:
                continue
            field_name, field_type = config_mapping[config_key]
            try:
                if field_type == bool:
                    value = self._parse_bool(raw_value)
                elif field_type == int:
                    value = int(raw_value)
                elif field_type == list:
                    value = self.parse_url_list(raw_value)
                else:
                    # Blank optional settings mean "not set"
                    value = raw_value.strip() or None
            except (ValueError, TypeError) as e:
                raise ConfigurationError(f"Invalid value for {config_key}: {raw_value} ({e})") from e

            if value is None and field_name in ("keys_directory", "key_file_prefix", "log_level"):
                continue
            config_kwargs[field_name] = value

        return Config(**config_kwargs)

    @staticmethod
    def parse_url_list(raw_value: str) -> List[str]:
        """Split a comma separated URL list, keeping order and dropping blanks."""
        urls = []
        for part in raw_value.split(","):
            url = part.strip().rstrip("/")
            if url:
                urls.append(url)
        return urls

    def _parse_bool(self, value: Any) -> bool:
        """Parse boolean value from string."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1", "on", "enabled")
        return bool(value)

    def validate_config(self, config: Config) -> ConfigValidationResult:
        """
        Validate configuration settings.

        Args:
            config: Configuration object to validate

        Returns:
            ConfigValidationResult listing errors and warnings
        """
        result = ConfigValidationResult()

        if not config.cert_gen_urls:
            result.error("cert_gen_urls", "At least one certificate issuer URL is required")

        for url in config.cert_gen_urls:
            parsed = urlparse(url)
            if parsed.scheme != "https" or not parsed.netloc:
                result.error("cert_gen_urls", f"Issuer URL must be an https URL: {url}")

        if config.ca_bundle_path and not os.path.isfile(config.ca_bundle_path):
            result.error("ca_bundle_path", f"CA bundle file not found: {config.ca_bundle_path}")

        keys_directory = os.path.expanduser(config.keys_directory)
        if not os.path.isdir(keys_directory):
            result.warn("keys_directory",
                        f"Keys directory does not exist and will be created: {keys_directory}")

        if config.log_file_path:
            log_dir = os.path.dirname(config.log_file_path)
            if log_dir and not os.path.exists(log_dir):
                result.warn("log_file_path", f"Log directory does not exist: {log_dir}")

        if config.save_x509_certificate and not config.request_x509:
            result.warn("save_x509_certificate",
                        "X.509 certificates are not requested, nothing will be saved")

        return result

    def create_default_config_file(self, config_path: str) -> None:
        """
        Create a default configuration file with example settings.

        Args:
            config_path: Path where to create the config file
        """
        config_dir = os.path.dirname(config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(config_path, 'w') as f:
            f.write(DEFAULT_CONFIG_CONTENT)

        self.logger.info(f"Created default configuration file: {config_path}")
