"""Adapters — network provider bindings.

Public re-exports for convenient access.
"""

from netconverge.adapters.base import NetworkProvider
from netconverge.adapters.mock import InMemoryNetworkProvider

__all__ = [
    "InMemoryNetworkProvider",
    "NetworkProvider",
]
