"""
Command line entry point for the credential enrollment client.
Loads configuration, prompts for the password, generates a keypair and
exchanges it for certificates from the first issuer that answers.
"""

import os
import sys
import getpass
import logging
from typing import Callable, Optional

from .models.config import Config
from .models.errors import GetCredsError, ConfigurationError, IdentityError
from .security.credentials import Credentials, SecretBytes
from .security.certificates import describe_certificate
from .security.keypair_service import KeyPairGenerator
from .security.tls import TLSConfig
from .services.config_service import ConfigService
from .services.logging_service import LoggingService
from .services.session_authenticator import SessionAuthenticator
from .services.certificate_requester import CertificateRequester
from .services.failover_controller import EndpointFailoverController
from .services.certificate_persister import CertificatePersister


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def prompt_password(identity: str) -> str:
    return getpass.getpass(f"Password for {identity}: ")


class EnrollmentApplication:
    """One certificate enrollment run."""

    def __init__(self, config_path: Optional[str] = None, identity: Optional[str] = None,
                 debug: bool = False,
                 password_provider: Callable[[str], str] = prompt_password):
        """
        Initialize the application.

        Args:
            config_path: Path to configuration file (optional)
            identity: User name to enroll; defaults to the current OS user
            debug: Log at DEBUG level regardless of configuration
            password_provider: Returns the password for an identity
        """
        self.config_path = config_path or self._get_default_config_path()
        self.identity = identity
        self.debug = debug
        self.password_provider = password_provider
        self.logger = logging.getLogger(__name__)
        self.logging_service = None
        self.config_service = None
        self.config: Optional[Config] = None

    def _get_default_config_path(self) -> str:
        """Get the default configuration file path."""
        possible_paths = [
            "getcreds.properties",
            os.path.expanduser("~/.getcreds/config.properties"),
            "/etc/getcreds/config.properties"
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return possible_paths[0]

    def initialize(self) -> bool:
        """
        Set up logging and load configuration.

        Returns:
            True if the configuration is usable, False otherwise
        """
        self.logging_service = LoggingService(log_level="DEBUG" if self.debug else "INFO")

        try:
            self.logger.info(f"Loading configuration from: {self.config_path}")
            self.config_service = ConfigService()
            self.config = self.config_service.load_config(self.config_path)
        except ConfigurationError as e:
            self.logger.critical(str(e))
            return False

        if not self.debug:
            self.logging_service.set_level(self.config.log_level)
        if self.config.log_file_path:
            self.logging_service.add_file_log(self.config.log_file_path)

        self.logger.debug(f"Issuers: {', '.join(self.config.cert_gen_urls)}")
        return True

    def _get_credentials(self) -> Credentials:
        identity = self.identity
        if not identity:
            try:
                identity = getpass.getuser()
            except (OSError, KeyError) as e:
                raise IdentityError(f"Cannot determine current user: {e}") from e
        if not identity:
            raise IdentityError("No user identity available")

        try:
            password = self.password_provider(identity)
        except (EOFError, KeyboardInterrupt) as e:
            raise IdentityError("Password entry cancelled") from e

        secret = SecretBytes(password)
        del password
        return Credentials(identity=identity, secret=secret)

    def enroll(self) -> dict:
        """
        Run the enrollment transaction.

        Returns:
            Mapping of certificate type to the file it was saved in

        Raises:
            GetCredsError: On any fatal failure
        """
        config = self.config
        credentials = self._get_credentials()

        try:
            tls_config = TLSConfig(ca_bundle_path=config.ca_bundle_path)
            key_pair = KeyPairGenerator(key_size=config.rsa_key_size).generate(config.private_key_path)
        except FileNotFoundError as e:
            credentials.wipe()
            raise ConfigurationError(str(e)) from e
        except GetCredsError:
            credentials.wipe()
            raise

        controller = EndpointFailoverController(
            authenticator=SessionAuthenticator(timeout=config.request_timeout_seconds),
            requester=CertificateRequester(timeout=config.request_timeout_seconds),
            request_x509=config.request_x509,
            performance_monitor=self.logging_service.performance_monitor
        )
        bundle = controller.enroll(key_pair, credentials, config.cert_gen_urls, tls_config)

        if bundle.has_x509_certificate():
            self.logger.info(f"X.509 certificate: {describe_certificate(bundle.x509_certificate)}")

        x509_path = config.x509_certificate_path if config.save_x509_certificate else None
        return CertificatePersister().save_bundle(bundle, config.ssh_certificate_path, x509_path)

    def run(self) -> int:
        """
        Enroll and report the outcome.

        Returns:
            Process exit status
        """
        if self.config is None:
            self.logger.critical("Application not initialized. Call initialize() first.")
            return EXIT_FAILURE

        try:
            written = self.enroll()
        except GetCredsError as e:
            self.logger.critical(str(e))
            return EXIT_FAILURE

        for cert_type, path in written.items():
            self.logger.info(f"Saved {cert_type} certificate: {path}")
        self.logger.info("Success")
        return EXIT_SUCCESS


def main(argv=None):
    """Main entry point for the application."""
    import argparse

    parser = argparse.ArgumentParser(description='Obtain short-lived certificates from a certificate issuer')
    parser.add_argument('--config', '-c', help='Configuration file path')
    parser.add_argument('--user', '-u', help='User name to enroll (default: current user)')
    parser.add_argument('--debug', action='store_true', help='Enable debug messages to console')
    parser.add_argument('--check-config', action='store_true', help='Check configuration and exit')
    parser.add_argument('--create-config', metavar='PATH', help='Write an example configuration file and exit')

    args = parser.parse_args(argv)

    if args.create_config:
        ConfigService().create_default_config_file(args.create_config)
        print(f"Example configuration written to {args.create_config}")
        sys.exit(EXIT_SUCCESS)

    app = EnrollmentApplication(config_path=args.config, identity=args.user, debug=args.debug)

    if not app.initialize():
        sys.exit(EXIT_FAILURE)

    if args.check_config:
        print("Configuration check passed")
        print(f"Config path: {app.config_path}")
        print(f"Issuers: {', '.join(app.config.cert_gen_urls)}")
        print(f"Private key: {app.config.private_key_path}")
        sys.exit(EXIT_SUCCESS)

    sys.exit(app.run())


if __name__ == '__main__':
    main()
