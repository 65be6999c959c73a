"""
Mocked Security Gate

Simulates the OAuth2 client-credentials flow, bearer/scope enforcement and
mTLS client-certificate checks of the PI-SPI platform. Tokens are opaque
``mock-token-*`` strings; nothing here performs real cryptography.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
import time

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import SimulatorConfig, get_config
from .logging_config import get_logger, log_action


logger = get_logger("pispi.security")

# Bearer scheme, errors rendered by the gate itself
bearer_scheme = HTTPBearer(auto_error=False)


def get_request_config(request: Request) -> SimulatorConfig:
    """Configuration of the application serving the request"""
    return getattr(request.app.state, "config", None) or get_config()


class OAuthError(Exception):
    """Token endpoint failure, rendered as an RFC 6749 error body"""

    def __init__(self, status_code: int, error: str, description: str):
        super().__init__(description)
        self.status_code = status_code
        self.error = error
        self.description = description

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "error_description": self.description}


@dataclass(frozen=True)
class Principal:
    """Authenticated API client"""
    client_id: str
    scopes: List[str]


def issue_token(params: Mapping[str, Any], config: SimulatorConfig) -> Dict[str, Any]:
    """
    Client-credentials grant.

    Raises:
        OAuthError: on missing parameters, unsupported grant type or bad credentials
    """
    client_id = params.get("client_id")
    client_secret = params.get("client_secret")
    grant_type = params.get("grant_type")

    if not client_id or not client_secret or not grant_type:
        raise OAuthError(
            status.HTTP_400_BAD_REQUEST, "invalid_request",
            "Les paramètres client_id, client_secret et grant_type sont obligatoires"
        )

    if grant_type != "client_credentials":
        raise OAuthError(
            status.HTTP_400_BAD_REQUEST, "unsupported_grant_type",
            "Seul le grant_type client_credentials est supporté"
        )

    if client_id != config.oauth_client_id or client_secret != config.oauth_client_secret:
        log_action(logger, "warning", "Token refused: invalid client credentials",
                   action="issue_token", extra={"client_id": client_id})
        raise OAuthError(
            status.HTTP_401_UNAUTHORIZED, "invalid_client", "Identifiants client invalides"
        )

    token = {
        "access_token": f"{config.token_prefix}{int(time.time() * 1000)}",
        "token_type": "Bearer",
        "expires_in": config.token_expires_in,
        "scope": " ".join(config.granted_scopes),
    }
    log_action(logger, "info", "OAuth2 token issued", action="issue_token",
               extra={"client_id": client_id, "scope": token["scope"]})
    return token


def verify_client_certificate(
    x_client_certificate: Optional[str] = Header(default=None),
    config: SimulatorConfig = Depends(get_request_config)
) -> str:
    """mTLS gate: the certificate must be issued by a trusted PI-SPI authority"""
    certificate = x_client_certificate or config.mtls_default_certificate
    if not certificate:
        log_action(logger, "warning", "Client certificate missing", action="verify_certificate")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Un certificat client valide est requis pour accéder à cette API"
        )

    if not any(issuer in certificate for issuer in config.mtls_trusted_issuers):
        log_action(logger, "warning", "Client certificate rejected", action="verify_certificate",
                   extra={"cert": certificate[:20] + "..."})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Le certificat client doit être délivré par la BCEAO"
        )

    return certificate


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    certificate: str = Depends(verify_client_certificate),
    config: SimulatorConfig = Depends(get_request_config)
) -> Principal:
    """Bearer gate: any ``mock-token-*`` token is accepted with the configured scopes"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token d'authentification manquant ou invalide",
            headers={"WWW-Authenticate": "Bearer"}
        )

    if not credentials.credentials.startswith(config.token_prefix):
        log_action(logger, "warning", "Bearer token rejected", action="verify_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Le token d'authentification est invalide ou expiré",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return Principal(client_id="mock-client", scopes=list(config.granted_scopes))


def require_scope(scope: str):
    """Dependency factory for scope checking"""
    def check(principal: Principal = Depends(get_principal)) -> Principal:
        if scope not in principal.scopes:
            log_action(logger, "warning", "Insufficient scope", action="verify_scope",
                       extra={"required": scope, "available": principal.scopes})
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission {scope} requise pour accéder à cette ressource"
            )
        return principal
    return check
