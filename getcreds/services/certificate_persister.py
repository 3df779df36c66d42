"""
Writes issued certificates next to the keypair.
"""
import logging
from typing import Dict, Optional

from ..models.enrollment import CertificateBundle
from ..models.errors import PersistenceError
from ..security.files import atomic_write


CERTIFICATE_MODE = 0o644


class CertificatePersister:
    """Stores certificate bytes, atomically replacing earlier files."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def write(self, path: str, certificate: bytes) -> None:
        """
        Write one certificate file.

        Raises:
            PersistenceError: If the file cannot be written
        """
        if not certificate:
            raise PersistenceError(f"Refusing to write an empty certificate to {path}")
        try:
            atomic_write(path, certificate, CERTIFICATE_MODE)
        except OSError as e:
            raise PersistenceError(f"Failed to write certificate to {path}: {e}") from e
        self.logger.info(f"Saved certificate to {path}")

    def save_bundle(self, bundle: CertificateBundle, ssh_path: str,
                    x509_path: Optional[str] = None) -> Dict[str, str]:
        """
        Write the SSH certificate and, if a path is given, the X.509 certificate.

        Returns:
            Mapping of certificate type to the path it was written to
        """
        if not bundle.has_ssh_certificate():
            raise PersistenceError("Bundle has no SSH certificate to save")

        written = {}
        self.write(ssh_path, bundle.ssh_certificate)
        written['ssh'] = ssh_path

        if x509_path and bundle.has_x509_certificate():
            self.write(x509_path, bundle.x509_certificate)
            written['x509'] = x509_path

        return written
