"""
Security package: keys, credentials and TLS settings.
"""
from .credentials import Credentials, SecretBytes
from .keypair_service import KeyPairGenerator
from .tls import TLSConfig, TLSAdapter, create_transport
from .certificates import CertificateInfo, get_certificate_info, describe_certificate

__all__ = [
    'Credentials',
    'SecretBytes',
    'KeyPairGenerator',
    'TLSConfig',
    'TLSAdapter',
    'create_transport',
    'CertificateInfo',
    'get_certificate_info',
    'describe_certificate'
]
