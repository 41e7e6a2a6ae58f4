"""Autenticação: bearer token client_credentials e JWTs de entrada."""

from .authorize import TokenResponse, fetch_access_token
from .server_token import ServerTokenValidator, extract_bearer_token, jwks_url
from .token_cache import DEFAULT_SAFETY_MARGIN_SECONDS, TokenCache

__all__ = [
    "DEFAULT_SAFETY_MARGIN_SECONDS",
    "ServerTokenValidator",
    "TokenCache",
    "TokenResponse",
    "extract_bearer_token",
    "fetch_access_token",
    "jwks_url",
]
