"""
Network provider base — the contract between the core and a cloud's network API.

The convergence core only talks to the provider through this
interface.  A provider is always passed in explicitly; there is no
module-level client.

Implementations raise ``ProviderError`` for any failed call.  Retrying
is not their concern: the core decides which calls are polled.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from netconverge.core.models.network import (
    IngressPermission,
    NetworkDomain,
    SecurityGroup,
    Subnet,
)


class NetworkProvider(ABC):
    """Abstract base class for network providers.

    To add a provider:
        1. Subclass NetworkProvider
        2. Implement the listing and mutation primitives
        3. Map provider responses into the core models
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The provider identifier (e.g., 'ec2', 'memory')."""

    @abstractmethod
    def list_domains(self) -> list[NetworkDomain]:
        """List every VPC visible to the caller."""

    @abstractmethod
    def list_subnets(self) -> list[Subnet]:
        """List every subnet visible to the caller."""

    @abstractmethod
    def list_security_groups(self) -> list[SecurityGroup]:
        """List every security group visible to the caller."""

    @abstractmethod
    def create_security_group(
        self, name: str, description: str, domain_id: str
    ) -> SecurityGroup:
        """Create an empty security group in a VPC."""

    @abstractmethod
    def authorize_ingress(
        self, group_id: str, permissions: list[IngressPermission]
    ) -> None:
        """Append ingress permissions to an existing group."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
