"""
Domain models — Pydantic types for the network convergence core.

All models are re-exported here for convenient access:

    from netconverge.core.models import NetworkDomain, Subnet, SecurityGroup
"""

from netconverge.core.models.network import (
    ALL_PROTOCOLS,
    IngressPermission,
    IpRange,
    NetworkDomain,
    SecurityGroup,
    Subnet,
    Tag,
)
from netconverge.core.models.result import ConvergeResult

__all__ = [
    "ALL_PROTOCOLS",
    # result.py
    "ConvergeResult",
    # network.py
    "IngressPermission",
    "IpRange",
    "NetworkDomain",
    "SecurityGroup",
    "Subnet",
    "Tag",
]
