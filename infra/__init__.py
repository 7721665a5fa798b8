"""
Infrastructure module exports.

Configuration and bootstrap for the gateway components.
"""

from .config import ConfigurationError, GatewayConfig, get_config
from .bootstrap import GatewayBootstrap, default_registry

__all__ = [
    "GatewayConfig",
    "ConfigurationError",
    "get_config",
    "GatewayBootstrap",
    "default_registry",
]
