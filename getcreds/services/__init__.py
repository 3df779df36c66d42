"""
Services package for the credential enrollment client.
"""

from .config_service import ConfigService
from .logging_service import LoggingService, PerformanceMonitor
from .session_authenticator import SessionAuthenticator
from .certificate_requester import CertificateRequester
from .failover_controller import EndpointFailoverController
from .certificate_persister import CertificatePersister

__all__ = [
    'ConfigService',
    'LoggingService',
    'PerformanceMonitor',
    'SessionAuthenticator',
    'CertificateRequester',
    'EndpointFailoverController',
    'CertificatePersister'
]
