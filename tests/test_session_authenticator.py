"""
Tests for issuer login.
"""
import base64
import unittest
from unittest.mock import Mock, patch

import requests
from requests.auth import HTTPBasicAuth
from requests.cookies import cookiejar_from_dict

from getcreds.models.errors import CandidateAuthError
from getcreds.security.credentials import SecretBytes
from getcreds.security.tls import TLSConfig
from getcreds.services.session_authenticator import SessionAuthenticator


BASE_URL = "https://ca1.example.com"


def make_response(status_code=200, cookies=None):
    response = Mock()
    response.status_code = status_code
    response.cookies = cookiejar_from_dict(cookies or {})
    return response


class TestSessionAuthenticator(unittest.TestCase):
    """Test cases for SessionAuthenticator."""

    def setUp(self):
        """Set up test fixtures."""
        self.transport = Mock()
        self.authenticator = SessionAuthenticator(
            timeout=5,
            transport_factory=lambda tls_config: self.transport
        )
        self.tls_config = TLSConfig()
        self.secret = SecretBytes("hunter2")

    def test_login_success(self):
        """A 200 response with cookies yields a usable session."""
        self.transport.post.return_value = make_response(
            200, {"auth_cookie": "abc", "csrf": "def"}
        )

        session = self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertEqual(session.base_url, BASE_URL)
        self.assertEqual(session.cookies, {"auth_cookie": "abc", "csrf": "def"})
        self.assertTrue(session.is_usable())
        self.assertIs(session.transport, self.transport)
        self.transport.close.assert_not_called()

    def test_login_request_shape(self):
        """Login posts Basic credentials to the fixed login path with a timeout."""
        self.transport.post.return_value = make_response(200, {"auth_cookie": "abc"})

        self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        args, kwargs = self.transport.post.call_args
        self.assertEqual(args[0], "https://ca1.example.com/api/v0/login")
        self.assertIsInstance(kwargs["auth"], HTTPBasicAuth)
        self.assertEqual(kwargs["auth"].username, b"alice")
        self.assertEqual(kwargs["auth"].password, b"hunter2")
        self.assertEqual(kwargs["timeout"], 5)

    def test_login_non_ascii_identity(self):
        """User names outside latin-1 are encoded as UTF-8 in the Basic header."""
        self.transport.post.return_value = make_response(200, {"auth_cookie": "abc"})

        self.authenticator.login(BASE_URL, "dmitriyЖ", self.secret, self.tls_config)

        auth = self.transport.post.call_args[1]["auth"]
        prepared = auth(requests.Request("POST", BASE_URL + "/api/v0/login").prepare())
        expected = base64.b64encode("dmitriyЖ:hunter2".encode("utf-8")).decode("ascii")
        self.assertEqual(prepared.headers["Authorization"], "Basic " + expected)

    def test_unexpected_error_closes_transport(self):
        """Errors outside the requests hierarchy still release the connection."""
        self.transport.post.side_effect = UnicodeEncodeError("latin-1", "Ж", 0, 1, "ordinal not in range")

        with self.assertRaises(UnicodeEncodeError):
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.transport.close.assert_called_once()

    def test_login_leaves_master_secret_intact(self):
        """The caller's secret survives so the next candidate can use it."""
        self.transport.post.return_value = make_response(200, {"auth_cookie": "abc"})

        self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertFalse(self.secret.wiped)
        with self.secret.exposed() as raw:
            self.assertEqual(bytes(raw), b"hunter2")

    def test_login_forbidden(self):
        """A non-200 status is a candidate failure and closes the transport."""
        self.transport.post.return_value = make_response(403, {"auth_cookie": "abc"})

        with self.assertRaises(CandidateAuthError) as cm:
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertIn("403", str(cm.exception))
        self.assertEqual(cm.exception.base_url, BASE_URL)
        self.transport.close.assert_called_once()

    def test_login_without_cookies(self):
        """A 200 response without cookies is not a usable session."""
        self.transport.post.return_value = make_response(200, {})

        with self.assertRaises(CandidateAuthError) as cm:
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertIn("no session cookies", str(cm.exception))
        self.transport.close.assert_called_once()

    def test_login_timeout(self):
        """Timeouts are candidate failures."""
        self.transport.post.side_effect = requests.exceptions.Timeout("read timed out")

        with self.assertRaises(CandidateAuthError) as cm:
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertIn("timed out", str(cm.exception))
        self.transport.close.assert_called_once()

    def test_login_connection_error(self):
        """Connection and TLS errors are candidate failures."""
        self.transport.post.side_effect = requests.exceptions.SSLError("certificate verify failed")

        with self.assertRaises(CandidateAuthError) as cm:
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertIn("certificate verify failed", str(cm.exception))

    def test_errors_never_contain_password(self):
        """The password does not leak into error messages."""
        self.transport.post.return_value = make_response(401)

        with self.assertRaises(CandidateAuthError) as cm:
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertNotIn("hunter2", str(cm.exception))

    def test_wiped_secret_cannot_log_in(self):
        """A wiped secret is refused before any request is made."""
        self.secret.wipe()

        with self.assertRaises(ValueError):
            self.authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.transport.post.assert_not_called()

    @patch('getcreds.services.session_authenticator.requests.Session.post')
    def test_login_with_default_transport(self, mock_post):
        """The default transport verifies TLS and is used for the login request."""
        mock_post.return_value = make_response(200, {"auth_cookie": "abc"})
        authenticator = SessionAuthenticator(timeout=3)

        session = authenticator.login(BASE_URL, "alice", self.secret, self.tls_config)

        self.assertIsInstance(session.transport, requests.Session)
        self.assertIs(session.transport.verify, True)
        mock_post.assert_called_once()
        session.close()
        self.assertIsNone(session.transport)


if __name__ == '__main__':
    unittest.main()
