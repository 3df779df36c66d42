"""
Exception types raised by the enrollment services.
"""
from typing import List, Optional


class GetCredsError(Exception):
    """Base class for all enrollment errors."""


class ConfigurationError(GetCredsError, ValueError):
    """Configuration file is missing, unparsable or invalid."""


class IdentityError(GetCredsError):
    """The user name or password could not be obtained."""


class KeyGenerationError(GetCredsError):
    """The local keypair could not be generated or stored."""


class CandidateError(GetCredsError):
    """A single issuer endpoint failed; the next candidate may still succeed."""

    stage = "candidate"

    def __init__(self, base_url: str, message: str):
        super().__init__(f"{base_url}: {message}")
        self.base_url = base_url
        self.message = message


class CandidateAuthError(CandidateError):
    """Login failed or returned no session cookies."""

    stage = "login"


class CandidateCertError(CandidateError):
    """A certificate request failed for one endpoint."""

    stage = "certificate"


class EnrollmentExhaustedError(GetCredsError):
    """Every candidate endpoint failed."""

    def __init__(self, failures: Optional[List] = None):
        self.failures = list(failures or [])
        lines = [f"Failed to get credentials from {len(self.failures)} endpoint(s)"]
        for failure in self.failures:
            lines.append(f"  - {failure}")
        super().__init__("\n".join(lines))


class PersistenceError(GetCredsError):
    """The certificate could not be written to disk."""
