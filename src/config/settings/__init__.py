"""Agregador de settings do SDK UIM.

Re-exporta settings e funções de carga.
"""

from __future__ import annotations

from config.settings.uim import (
    SDK_DEBUG_FLAG,
    UIM_DEFAULT_DOMAIN,
    UIM_DEFAULT_SCHEME,
    UIM_DEFAULT_SERVER_ISSUER,
    UIM_DEFAULT_TOKEN_ENDPOINT,
    UimSettings,
    get_uim_settings,
    with_base_url,
)

__all__ = [
    "SDK_DEBUG_FLAG",
    "UIM_DEFAULT_DOMAIN",
    "UIM_DEFAULT_SCHEME",
    "UIM_DEFAULT_SERVER_ISSUER",
    "UIM_DEFAULT_TOKEN_ENDPOINT",
    "UimSettings",
    "get_uim_settings",
    "with_base_url",
]
