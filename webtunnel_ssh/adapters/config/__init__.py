"""
Configuration adapters
"""
from .loader import ConfigLoader, PropertyConfig
from .settings import connection_parameters, tls_policy, proxy_settings

__all__ = [
    "ConfigLoader",
    "PropertyConfig",
    "connection_parameters",
    "tls_policy",
    "proxy_settings",
]
