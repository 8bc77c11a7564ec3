"""Relay configuration and secrets lookup."""

from .relay_config import RelayConfig

__all__ = ['RelayConfig']
