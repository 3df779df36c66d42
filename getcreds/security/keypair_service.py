"""
Local keypair generation and storage.
"""
import os
import logging
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..models.config import MIN_RSA_KEY_SIZE
from ..models.enrollment import KeyPair
from ..models.errors import KeyGenerationError
from .files import stage_file, discard


PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644
KEYS_DIRECTORY_MODE = 0o700


class KeyPairGenerator:
    """Generates RSA keypairs usable for both SSH and X.509 certificates."""

    def __init__(self, key_size: int = MIN_RSA_KEY_SIZE, public_exponent: int = 65537):
        if key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_RSA_KEY_SIZE}")
        self.key_size = key_size
        self.public_exponent = public_exponent
        self.logger = logging.getLogger(__name__)

    def generate(self, destination_path: str) -> KeyPair:
        """
        Generate a keypair and store it at destination_path.

        The private key is written to ``destination_path`` as a PEM RSA
        private key (mode 0600) and the public key to
        ``destination_path + ".pub"`` as an OpenSSH authorized-key line.
        Existing files are replaced.

        Args:
            destination_path: Path of the private key file

        Returns:
            KeyPair for the new key

        Raises:
            KeyGenerationError: If the key cannot be generated or stored
        """
        public_key_path = destination_path + ".pub"

        try:
            private_key = rsa.generate_private_key(
                public_exponent=self.public_exponent,
                key_size=self.key_size
            )
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeyGenerationError(f"Failed to generate RSA key: {e}") from e

        key_pair = KeyPair(
            private_key=private_key,
            private_key_path=destination_path,
            public_key_path=public_key_path
        )

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption()
        )

        try:
            self._ensure_directory(os.path.dirname(os.path.abspath(destination_path)))
            self._store(destination_path, private_pem, public_key_path, key_pair.ssh_public_key())
        except OSError as e:
            raise KeyGenerationError(f"Failed to save keypair to {destination_path}: {e}") from e

        self.logger.info(f"Generated {self.key_size}-bit RSA keypair at {destination_path}")
        return key_pair

    def _ensure_directory(self, directory: str) -> None:
        if not os.path.isdir(directory):
            os.makedirs(directory, mode=KEYS_DIRECTORY_MODE, exist_ok=True)
            self.logger.info(f"Created keys directory: {directory}")

    def _store(self, private_path: str, private_data: bytes,
               public_path: str, public_data: bytes) -> None:
        """Stage both halves before renaming either; a failed second rename puts the old private key back."""
        staged = []
        try:
            staged.append(stage_file(private_path, private_data, PRIVATE_KEY_MODE))
            staged.append(stage_file(public_path, public_data, PUBLIC_KEY_MODE))
            previous = self._stage_previous(private_path)
            if previous:
                staged.append(previous)

            os.replace(staged[0], private_path)
            try:
                os.replace(staged[1], public_path)
            except OSError:
                self._restore_private_key(private_path, previous, public_path)
                raise
        finally:
            for tmp_path in staged:
                discard(tmp_path)

    def _stage_previous(self, private_path: str) -> Optional[str]:
        """Copy an existing private key aside so it can be put back."""
        if not os.path.exists(private_path):
            return None
        with open(private_path, "rb") as f:
            return stage_file(private_path, f.read(), PRIVATE_KEY_MODE)

    def _restore_private_key(self, private_path: str, previous: Optional[str],
                             public_path: str) -> None:
        try:
            if previous:
                os.replace(previous, private_path)
            else:
                os.unlink(private_path)
        except OSError as e:
            self.logger.error(
                f"Private key {private_path} no longer matches {public_path} "
                f"and could not be restored: {e}"
            )
