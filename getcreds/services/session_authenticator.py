"""
Login against a certificate issuer.
"""
import logging
from typing import Callable, Optional

import requests
from requests.auth import HTTPBasicAuth

from ..models.enrollment import Session
from ..models.errors import CandidateAuthError
from ..security.credentials import SecretBytes
from ..security.tls import TLSConfig, create_transport


LOGIN_PATH = "/api/v0/login"


class SessionAuthenticator:
    """Performs the Basic-Auth login that opens a cookie session with an issuer."""

    def __init__(self, timeout: int = 5,
                 transport_factory: Optional[Callable[[TLSConfig], requests.Session]] = None):
        """
        Initialize the authenticator.

        Args:
            timeout: Per-request timeout in seconds
            transport_factory: Builds the HTTP session for one issuer
        """
        self.timeout = timeout
        self.transport_factory = transport_factory or create_transport
        self.logger = logging.getLogger(__name__)

    def login(self, base_url: str, identity: str, secret: SecretBytes,
              tls_config: TLSConfig) -> Session:
        """
        Log in to one issuer.

        Args:
            base_url: Issuer base URL
            identity: User name
            secret: User password
            tls_config: Trust settings

        Returns:
            Session holding the issuer's cookies and the open connection

        Raises:
            CandidateAuthError: On transport failure, non-200 status or a
                response without cookies
            ValueError: If the secret has already been wiped
        """
        if secret.wiped:
            raise ValueError("Cannot log in with a wiped secret")

        login_url = base_url + LOGIN_PATH
        transport = self.transport_factory(tls_config)

        try:
            self.logger.info(f"Logging in to {login_url} as {identity}")
            # Header credentials go out as UTF-8; requests would otherwise use latin-1
            with secret.exposed() as password:
                response = transport.post(
                    login_url,
                    auth=HTTPBasicAuth(identity.encode("utf-8"), bytes(password)),
                    timeout=self.timeout
                )

            if response.status_code != 200:
                raise CandidateAuthError(base_url, f"login returned HTTP {response.status_code}")

            cookies = requests.utils.dict_from_cookiejar(response.cookies)
            session = Session(base_url=base_url, cookies=cookies, transport=transport)
            if not session.is_usable():
                raise CandidateAuthError(base_url, "no session cookies from login")

            self.logger.debug(f"Login to {base_url} returned {len(cookies)} cookie(s)")
            return session

        except requests.exceptions.Timeout as e:
            transport.close()
            raise CandidateAuthError(base_url, f"login timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            transport.close()
            raise CandidateAuthError(base_url, f"login request failed: {e}") from e
        except Exception:
            transport.close()
            raise
