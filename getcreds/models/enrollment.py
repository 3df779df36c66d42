"""
Data models for the certificate enrollment transaction.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


class CertType(Enum):
    """Certificate flavours an issuer can sign."""
    SSH = "ssh"
    X509 = "x509"


@dataclass
class KeyPair:
    """A freshly generated keypair and where it was stored."""
    private_key: rsa.RSAPrivateKey = field(repr=False)
    private_key_path: str
    public_key_path: str

    @property
    def key_size(self) -> int:
        return self.private_key.key_size

    def ssh_public_key(self) -> bytes:
        """Public key as an OpenSSH authorized-key line, newline terminated."""
        line = self.private_key.public_key().public_bytes(
            serialization.Encoding.OpenSSH,
            serialization.PublicFormat.OpenSSH
        )
        return line + b"\n"

    def pkix_public_key(self) -> bytes:
        """Public key as a PEM encoded SubjectPublicKeyInfo block."""
        return self.private_key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo
        )

    def key_material(self, cert_type: CertType) -> bytes:
        """Public key encoding the issuer expects for the given certificate type."""
        if cert_type == CertType.SSH:
            return self.ssh_public_key()
        return self.pkix_public_key()


@dataclass
class Session:
    """Cookies returned by one issuer's login, plus the connection they belong to."""
    base_url: str
    cookies: Dict[str, str]
    transport: Optional[requests.Session] = field(default=None, repr=False)

    def is_usable(self) -> bool:
        return len(self.cookies) > 0

    def belongs_to(self, base_url: str) -> bool:
        return self.base_url == base_url

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()
            self.transport = None

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False


@dataclass
class CertificateBundle:
    """Certificates obtained from a single issuer."""
    issuer_url: str
    ssh_certificate: Optional[bytes] = None
    x509_certificate: Optional[bytes] = None

    def has_ssh_certificate(self) -> bool:
        return bool(self.ssh_certificate)

    def has_x509_certificate(self) -> bool:
        return bool(self.x509_certificate)


@dataclass
class CandidateFailure:
    """Summary of why one candidate endpoint was abandoned."""
    base_url: str
    stage: str
    message: str

    def __str__(self):
        return f"{self.base_url} ({self.stage}): {self.message}"


@dataclass
class EnrollmentResult:
    """Terminal outcome of trying the candidate list."""
    success: bool
    bundle: Optional[CertificateBundle] = None
    failures: List[CandidateFailure] = field(default_factory=list)

    @property
    def attempts(self) -> int:
        return len(self.failures) + (1 if self.success else 0)

    @classmethod
    def success_result(cls, bundle: CertificateBundle,
                       failures: Optional[List[CandidateFailure]] = None) -> 'EnrollmentResult':
        """Create a successful enrollment result."""
        return cls(success=True, bundle=bundle, failures=list(failures or []))

    @classmethod
    def error_result(cls, failures: List[CandidateFailure]) -> 'EnrollmentResult':
        """Create a failed enrollment result."""
        return cls(success=False, failures=list(failures))
