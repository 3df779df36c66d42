"""
Configuration data models for the credential enrollment client.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ConfigurationError


MIN_RSA_KEY_SIZE = 2048


@dataclass
class Config:
    """Main configuration class containing all client settings."""

    # Issuer settings
    cert_gen_urls: List[str] = field(default_factory=list)

    # Client settings
    keys_directory: str = "~/.ssh"
    key_file_prefix: str = "getcreds"
    rsa_key_size: int = MIN_RSA_KEY_SIZE
    request_timeout_seconds: int = 5
    ca_bundle_path: Optional[str] = None
    request_x509: bool = True
    save_x509_certificate: bool = False

    # Application settings
    log_level: str = "INFO"
    log_file_path: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_types()

    def _validate_types(self):
        """Ensure all configuration values have correct types."""
        if not isinstance(self.cert_gen_urls, list):
            raise ConfigurationError("cert_gen_urls must be a list of URLs")

        if not isinstance(self.rsa_key_size, int) or self.rsa_key_size < MIN_RSA_KEY_SIZE:
            raise ConfigurationError(f"rsa_key_size must be an integer of at least {MIN_RSA_KEY_SIZE}")

        if not isinstance(self.request_timeout_seconds, int) or self.request_timeout_seconds <= 0:
            raise ConfigurationError("request_timeout_seconds must be a positive integer")

        if not self.key_file_prefix or os.sep in self.key_file_prefix:
            raise ConfigurationError("key_file_prefix must be a plain file name")

        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ConfigurationError("log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")

    @property
    def private_key_path(self) -> str:
        """Absolute location of the private key, with ~ expanded."""
        return os.path.join(os.path.expanduser(self.keys_directory), self.key_file_prefix)

    @property
    def ssh_certificate_path(self) -> str:
        return self.private_key_path + "-cert.pub"

    @property
    def x509_certificate_path(self) -> str:
        return self.private_key_path + "-x509-cert.pem"


ERROR = "error"
WARNING = "warning"


@dataclass
class ConfigIssue:
    """A problem with one configuration setting."""
    setting: str
    message: str
    severity: str = ERROR

    def __str__(self):
        return f"[{self.severity}] {self.setting}: {self.message}"


@dataclass
class ConfigValidationResult:
    """Issues collected while validating a Config."""
    issues: List[ConfigIssue] = field(default_factory=list)

    def error(self, setting: str, message: str) -> None:
        self.issues.append(ConfigIssue(setting, message, ERROR))

    def warn(self, setting: str, message: str) -> None:
        self.issues.append(ConfigIssue(setting, message, WARNING))

    @property
    def errors(self) -> List[ConfigIssue]:
        return [issue for issue in self.issues if issue.severity == ERROR]

    @property
    def warnings(self) -> List[ConfigIssue]:
        return [issue for issue in self.issues if issue.severity == WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def summary(self, severity: Optional[str] = None) -> str:
        """Render issues one per line, optionally only those of one severity."""
        selected = [issue for issue in self.issues if severity in (None, issue.severity)]
        if not selected:
            return "Configuration is valid"
        return "\n".join(f"  - {issue}" for issue in selected)
