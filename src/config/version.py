"""Versão do core do SDK (enviada no header x-sdk-core-version)."""

SDK_CORE_VERSION = "0.1.0"
