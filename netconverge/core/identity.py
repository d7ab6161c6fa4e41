"""
Cluster identity — where the logical cluster identifier comes from.

The identifier is opaque to the convergence core.  It is read once per
operation from an injected provider, never cached at module level.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from netconverge.core.errors import IdentityUnavailableError

DEFAULT_IDENTITY_ENV = "NETCONVERGE_CLUSTER_ID"


class ClusterIdentityProvider(ABC):
    """Source of the cluster identifier."""

    @abstractmethod
    def get_cluster_id(self) -> str:
        """Return the cluster identifier.

        Raises:
            IdentityUnavailableError: If it cannot be determined.
        """


class StaticIdentityProvider(ClusterIdentityProvider):
    """A fixed identifier, typically from configuration."""

    def __init__(self, cluster_id: str):
        self._cluster_id = cluster_id

    def get_cluster_id(self) -> str:
        if not self._cluster_id:
            raise IdentityUnavailableError("cluster id is empty")
        return self._cluster_id

    def __repr__(self) -> str:
        return f"<StaticIdentityProvider cluster_id={self._cluster_id!r}>"


class EnvIdentityProvider(ClusterIdentityProvider):
    """Reads the identifier from an environment variable on every call."""

    def __init__(self, var: str = DEFAULT_IDENTITY_ENV):
        self.var = var

    def get_cluster_id(self) -> str:
        value = os.environ.get(self.var, "").strip()
        if not value:
            raise IdentityUnavailableError(f"environment variable {self.var} is not set")
        return value
