"""
Sequential failover across candidate certificate issuers.
"""
import logging
from typing import List, Optional, Sequence

from ..models.enrollment import (
    CertType, KeyPair, CertificateBundle, CandidateFailure, EnrollmentResult
)
from ..models.errors import (
    CandidateError, CandidateCertError, ConfigurationError, EnrollmentExhaustedError
)
from ..security.credentials import Credentials
from ..security.tls import TLSConfig
from .certificate_requester import CertificateRequester
from .logging_service import PerformanceMonitor
from .session_authenticator import SessionAuthenticator


class EndpointFailoverController:
    """Tries issuers one at a time, in the given order, until one issues an SSH certificate."""

    def __init__(self,
                 authenticator: Optional[SessionAuthenticator] = None,
                 requester: Optional[CertificateRequester] = None,
                 request_x509: bool = True,
                 performance_monitor: Optional[PerformanceMonitor] = None):
        """
        Initialize the controller.

        Args:
            authenticator: Logs in to one issuer
            requester: Requests certificates from a logged-in issuer
            request_x509: Also ask each issuer for an X.509 certificate
            performance_monitor: Records how long each candidate attempt took
        """
        self.authenticator = authenticator or SessionAuthenticator()
        self.requester = requester or CertificateRequester()
        self.request_x509 = request_x509
        self.performance_monitor = performance_monitor or PerformanceMonitor()
        self.logger = logging.getLogger(__name__)

    def enroll(self, key_pair: KeyPair, credentials: Credentials,
               candidates: Sequence[str], tls_config: TLSConfig) -> CertificateBundle:
        """
        Obtain certificates from the first candidate that issues them.

        Returns:
            CertificateBundle from the winning issuer

        Raises:
            ConfigurationError: If candidates is empty
            EnrollmentExhaustedError: If every candidate failed
        """
        result = self.run(key_pair, credentials, candidates, tls_config)
        if not result.success:
            raise EnrollmentExhaustedError(result.failures)
        return result.bundle

    def run(self, key_pair: KeyPair, credentials: Credentials,
            candidates: Sequence[str], tls_config: TLSConfig) -> EnrollmentResult:
        """
        Try candidates in order and report the outcome without raising for
        per-candidate failures. The credentials are wiped before returning.

        Raises:
            ConfigurationError: If candidates is empty
        """
        try:
            if not candidates:
                raise ConfigurationError("No candidate endpoints to request certificates from")

            failures: List[CandidateFailure] = []
            for index, base_url in enumerate(candidates, start=1):
                self.logger.info(f"Attempting candidate {index}/{len(candidates)}: {base_url}")
                try:
                    with self.performance_monitor.measure_operation(
                        "candidate_attempt", {'base_url': base_url}
                    ):
                        bundle = self._try_candidate(base_url, key_pair, credentials, tls_config)
                except CandidateError as e:
                    self.logger.warning(f"Candidate {base_url} failed: {e.message}")
                    failures.append(CandidateFailure(base_url=base_url, stage=e.stage, message=e.message))
                    continue

                self.logger.info(f"Obtained certificates from {base_url}")
                return EnrollmentResult.success_result(bundle, failures)

            self.logger.error(f"All {len(candidates)} candidate endpoint(s) failed")
            return EnrollmentResult.error_result(failures)
        finally:
            credentials.wipe()

    def _try_candidate(self, base_url: str, key_pair: KeyPair, credentials: Credentials,
                       tls_config: TLSConfig) -> CertificateBundle:
        identity = credentials.identity
        session = self.authenticator.login(base_url, identity, credentials.secret, tls_config)

        with session:
            bundle = CertificateBundle(issuer_url=base_url)
            bundle.ssh_certificate = self.requester.request_certificate(
                session, base_url, identity, CertType.SSH, key_pair.key_material(CertType.SSH)
            )

            if self.request_x509:
                try:
                    bundle.x509_certificate = self.requester.request_certificate(
                        session, base_url, identity, CertType.X509, key_pair.key_material(CertType.X509)
                    )
                except CandidateCertError as e:
                    self.logger.warning(f"X.509 certificate not issued by {base_url}: {e.message}")

        return bundle
