"""
Certificate requests against an authenticated issuer session.
"""
import logging
from urllib.parse import quote

import requests

from ..models.enrollment import CertType, Session
from ..models.errors import CandidateCertError


CERTGEN_PATH = "/certgen/"
UPLOAD_FIELD = "pubkeyfile"


class CertificateRequester:
    """Uploads a public key and returns the certificate the issuer signs for it."""

    def __init__(self, timeout: int = 5):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def build_url(self, base_url: str, identity: str, cert_type: CertType) -> str:
        return f"{base_url}{CERTGEN_PATH}{quote(identity, safe='')}?type={cert_type.value}"

    def request_certificate(self, session: Session, base_url: str, identity: str,
                            cert_type: CertType, key_material: bytes) -> bytes:
        """
        Request a certificate of the given type.

        Args:
            session: Logged-in session for base_url
            base_url: Issuer base URL
            identity: User name the certificate is issued to
            cert_type: ssh or x509
            key_material: Public key in the encoding the certificate type needs

        Returns:
            Raw certificate bytes

        Raises:
            CandidateCertError: If the session is not for base_url, the request
                fails, or the issuer does not answer 200 with a body
        """
        if not session.belongs_to(base_url):
            raise CandidateCertError(base_url, f"session was issued by {session.base_url}")
        if session.transport is None:
            raise CandidateCertError(base_url, "session is closed")

        url = self.build_url(base_url, identity, cert_type)
        extension = "pub" if cert_type == CertType.SSH else "pem"
        files = {
            UPLOAD_FIELD: (f"{identity}.{extension}", key_material, "application/octet-stream")
        }
        self.logger.debug(f"Uploading {len(key_material)} bytes of key material to {url}")

        try:
            response = session.transport.post(
                url,
                files=files,
                cookies=session.cookies,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise CandidateCertError(base_url, f"{cert_type.value} request timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise CandidateCertError(base_url, f"{cert_type.value} request failed: {e}") from e

        if response.status_code != 200:
            self.logger.warning(f"Got HTTP {response.status_code} from {url}")
            raise CandidateCertError(base_url, f"{cert_type.value} request returned HTTP {response.status_code}")

        certificate = response.content
        if not certificate:
            raise CandidateCertError(base_url, f"{cert_type.value} request returned an empty body")

        self.logger.info(f"Received {cert_type.value} certificate from {base_url} ({len(certificate)} bytes)")
        return certificate
