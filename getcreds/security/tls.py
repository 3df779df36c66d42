"""
TLS client configuration for talking to certificate issuers.
"""
import ssl
import os
import logging
from dataclasses import dataclass
from typing import Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


@dataclass
class TLSConfig:
    """Trust settings for issuer connections.

    ``ca_bundle_path`` pins the issuers to a private root; when it is None
    the default trust store is used. Verification is never switched off.
    """
    ca_bundle_path: Optional[str] = None
    minimum_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2

    def __post_init__(self):
        if self.ca_bundle_path and not os.path.isfile(self.ca_bundle_path):
            raise FileNotFoundError(f"CA bundle not found: {self.ca_bundle_path}")

    @property
    def verify(self) -> Union[str, bool]:
        """Value for the ``verify`` argument of requests."""
        return self.ca_bundle_path or True

    def create_ssl_context(self) -> ssl.SSLContext:
        """Create an SSL context for verifying issuer certificates."""
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        if self.ca_bundle_path:
            context.load_verify_locations(cafile=self.ca_bundle_path)
        context.minimum_version = self.minimum_version
        context.check_hostname = True
        context.verify_mode = ssl.CERT_REQUIRED
        return context


class TLSAdapter(HTTPAdapter):
    """HTTPS adapter enforcing the client's TLS settings, without retries."""

    def __init__(self, tls_config: TLSConfig, **kwargs):
        self.tls_config = tls_config
        kwargs.setdefault("max_retries", Retry(total=0, read=False))
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self.tls_config.create_ssl_context()
        return super().init_poolmanager(*args, **kwargs)


def create_transport(tls_config: TLSConfig) -> requests.Session:
    """Create an HTTP session that only speaks verified HTTPS."""
    session = requests.Session()
    session.verify = tls_config.verify
    session.mount("https://", TLSAdapter(tls_config))
    # Plain HTTP is refused outright.
    session.mount("http://", _RefuseAdapter())
    return session


class _RefuseAdapter(HTTPAdapter):
    def send(self, request, **kwargs):
        raise requests.exceptions.InvalidURL(f"Refusing non-TLS request to {request.url}")
