"""Exceções compartilhadas do SDK."""

from .exceptions import (
    AsyncNotEnabledError,
    AuthenticationFailedError,
    CertificateError,
    ClientError,
    NetworkError,
    RequestTimeoutError,
    SdkError,
    ServerError,
)

__all__ = [
    "AsyncNotEnabledError",
    "AuthenticationFailedError",
    "CertificateError",
    "ClientError",
    "NetworkError",
    "RequestTimeoutError",
    "SdkError",
    "ServerError",
]
