"""
Test suite for the mocked security gate

Tests the client-credentials grant and the certificate, bearer and scope
dependencies in isolation.
"""

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from pispi_simulator.config import SimulatorConfig
from pispi_simulator.security import (
    OAuthError, Principal, get_principal, issue_token, require_scope, verify_client_certificate
)


class TestIssueToken:
    """Test the client-credentials grant"""

    def setup_method(self):
        """Set up test fixtures"""
        self.config = SimulatorConfig()
        self.params = {
            "client_id": "mock-client-id",
            "client_secret": "mock-client-secret",
            "grant_type": "client_credentials",
        }

    def test_token_issued(self):
        """Test a valid grant returns a mock bearer token"""
        token = issue_token(self.params, self.config)

        assert token["access_token"].startswith("mock-token-")
        assert token["token_type"] == "Bearer"
        assert token["expires_in"] == 3600
        assert "compte.read" in token["scope"].split()

    def test_missing_parameters(self):
        """Test every parameter is required"""
        for missing in self.params:
            params = {k: v for k, v in self.params.items() if k != missing}
            with pytest.raises(OAuthError) as exc_info:
                issue_token(params, self.config)
            assert exc_info.value.error == "invalid_request"
            assert exc_info.value.status_code == 400

    def test_unsupported_grant(self):
        """Test only client_credentials is supported"""
        with pytest.raises(OAuthError) as exc_info:
            issue_token(dict(self.params, grant_type="password"), self.config)
        assert exc_info.value.error == "unsupported_grant_type"

    def test_bad_credentials(self):
        """Test wrong client secret"""
        with pytest.raises(OAuthError) as exc_info:
            issue_token(dict(self.params, client_secret="wrong"), self.config)

        assert exc_info.value.status_code == 401
        assert exc_info.value.to_dict()["error"] == "invalid_client"


class TestGateDependencies:
    """Test certificate, bearer and scope checks"""

    def setup_method(self):
        """Set up test fixtures"""
        self.config = SimulatorConfig()

    def test_default_certificate(self):
        """Test the default test certificate is trusted"""
        assert verify_client_certificate(None, self.config) == "BCEAO-TEST-CERT"

    def test_untrusted_certificate(self):
        """Test a certificate from an unknown issuer is forbidden"""
        with pytest.raises(HTTPException) as exc_info:
            verify_client_certificate("EVIL-CA-CERT", self.config)
        assert exc_info.value.status_code == 403

    def test_certificate_required(self):
        """Test a missing certificate without default is unauthorized"""
        config = SimulatorConfig(mtls_default_certificate="")
        with pytest.raises(HTTPException) as exc_info:
            verify_client_certificate(None, config)
        assert exc_info.value.status_code == 401

    def test_bearer_accepted(self):
        """Test a mock token yields the configured scopes"""
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="mock-token-123")
        principal = get_principal(credentials, "BCEAO-TEST-CERT", self.config)
        assert principal.scopes == self.config.granted_scopes

    def test_bearer_missing_or_foreign(self):
        """Test missing and foreign tokens are unauthorized"""
        with pytest.raises(HTTPException) as exc_info:
            get_principal(None, "BCEAO-TEST-CERT", self.config)
        assert exc_info.value.status_code == 401

        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="real-jwt")
        with pytest.raises(HTTPException) as exc_info:
            get_principal(credentials, "BCEAO-TEST-CERT", self.config)
        assert exc_info.value.status_code == 401

    def test_scope_check(self):
        """Test scope presence"""
        check = require_scope("alias.delete")
        principal = Principal(client_id="mock-client", scopes=["alias.delete"])
        assert check(principal) == principal

        with pytest.raises(HTTPException) as exc_info:
            check(Principal(client_id="mock-client", scopes=["alias.read"]))
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Permission alias.delete requise pour accéder à cette ressource"
