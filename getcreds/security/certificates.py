"""
Inspection of certificates returned by an issuer.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID


logger = logging.getLogger(__name__)


@dataclass
class CertificateInfo:
    """Information about a certificate."""
    subject: str
    issuer: str
    serial_number: str
    not_before: datetime
    not_after: datetime
    is_valid: bool
    fingerprint: str
    common_name: Optional[str] = None


def get_certificate_info(cert_pem: bytes) -> CertificateInfo:
    """
    Extract information from a PEM encoded X.509 certificate.

    Raises:
        ValueError: If the data is not a PEM certificate
    """
    cert = x509.load_pem_x509_certificate(cert_pem)
    now = datetime.now(timezone.utc)

    not_before = cert.not_valid_before_utc
    not_after = cert.not_valid_after_utc

    common_name = None
    for attribute in cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME):
        common_name = attribute.value
        break

    return CertificateInfo(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial_number=str(cert.serial_number),
        not_before=not_before,
        not_after=not_after,
        is_valid=not_before <= now <= not_after,
        fingerprint=cert.fingerprint(hashes.SHA256()).hex(),
        common_name=common_name
    )


def describe_certificate(cert_pem: bytes) -> str:
    """One-line summary of an X.509 certificate for status output."""
    try:
        info = get_certificate_info(cert_pem)
    except ValueError as e:
        logger.debug(f"Issuer returned a non-PEM X.509 certificate: {e}")
        return f"{len(cert_pem)} bytes (unparsed)"
    return f"subject={info.subject} expires={info.not_after.isoformat()}"
