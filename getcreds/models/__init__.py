"""
Models package for the credential enrollment client.
"""

from .config import Config, ConfigIssue, ConfigValidationResult
from .enrollment import (
    CertType, KeyPair, Session, CertificateBundle, CandidateFailure, EnrollmentResult
)
from .errors import (
    GetCredsError, ConfigurationError, IdentityError, KeyGenerationError, CandidateError,
    CandidateAuthError, CandidateCertError, EnrollmentExhaustedError, PersistenceError
)

__all__ = [
    'Config',
    'ConfigIssue',
    'ConfigValidationResult',
    'CertType',
    'KeyPair',
    'Session',
    'CertificateBundle',
    'CandidateFailure',
    'EnrollmentResult',
    'GetCredsError',
    'ConfigurationError',
    'IdentityError',
    'KeyGenerationError',
    'CandidateError',
    'CandidateAuthError',
    'CandidateCertError',
    'EnrollmentExhaustedError',
    'PersistenceError'
]
