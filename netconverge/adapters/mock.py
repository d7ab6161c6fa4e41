"""
In-memory provider — test double and ``--mock`` backend.

Holds VPCs, subnets and security groups in dicts and reflects its own
mutations, so a second convergence pass sees what the first created.
Every call is recorded in ``call_log``; individual operations can be
made to fail a given number of times to simulate propagation delay.
"""

from __future__ import annotations

import itertools

from netconverge.adapters.base import NetworkProvider
from netconverge.core.errors import ProviderError
from netconverge.core.models.network import (
    IngressPermission,
    NetworkDomain,
    SecurityGroup,
    Subnet,
)

MUTATING_OPERATIONS = ("create_security_group", "authorize_ingress")


class InMemoryNetworkProvider(NetworkProvider):
    """Dict-backed network provider.

    By default every call succeeds.  Use ``set_failure`` to make the next
    N calls of an operation raise ``ProviderError``.
    """

    def __init__(
        self,
        domains: list[NetworkDomain] | None = None,
        subnets: list[Subnet] | None = None,
        security_groups: list[SecurityGroup] | None = None,
        provider_name: str = "memory",
    ):
        self._name = provider_name
        self._domains = list(domains or [])
        self._subnets = list(subnets or [])
        self._groups: dict[str, SecurityGroup] = {g.id: g for g in security_groups or []}
        self._failures: dict[str, int] = {}
        self._failure_message = "Mock failure"
        self._call_log: list[str] = []
        self._ids = itertools.count(1)

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[str]:
        """Names of every operation invoked, in order."""
        return self._call_log

    @property
    def mutating_calls(self) -> list[str]:
        return [op for op in self._call_log if op in MUTATING_OPERATIONS]

    @property
    def security_groups(self) -> list[SecurityGroup]:
        return list(self._groups.values())

    def set_failure(self, operation: str, times: int = 1, error: str = "Mock failure") -> None:
        """Make the next ``times`` calls of ``operation`` fail."""
        self._failures[operation] = times
        self._failure_message = error

    def add_subnet(self, subnet: Subnet) -> None:
        self._subnets.append(subnet)

    def list_domains(self) -> list[NetworkDomain]:
        self._record("list_domains")
        return [d.model_copy(deep=True) for d in self._domains]

    def list_subnets(self) -> list[Subnet]:
        self._record("list_subnets")
        return [s.model_copy(deep=True) for s in self._subnets]

    def list_security_groups(self) -> list[SecurityGroup]:
        self._record("list_security_groups")
        return [g.model_copy(deep=True) for g in self._groups.values()]

    def create_security_group(
        self, name: str, description: str, domain_id: str
    ) -> SecurityGroup:
        self._record("create_security_group")
        group = SecurityGroup(
            id=f"sg-{next(self._ids):08x}",
            name=name,
            domain_id=domain_id,
            description=description,
        )
        self._groups[group.id] = group
        return group.model_copy(deep=True)

    def authorize_ingress(
        self, group_id: str, permissions: list[IngressPermission]
    ) -> None:
        self._record("authorize_ingress")
        group = self._groups.get(group_id)
        if group is None:
            raise ProviderError(f"security group {group_id} does not exist")
        for perm in permissions:
            if group.has_permission(perm):
                raise ProviderError(f"duplicate permission on {group_id}")
            group.ingress.append(perm.model_copy(deep=True))

    def reset(self) -> None:
        """Clear the call log and configured failures."""
        self._call_log.clear()
        self._failures.clear()

    def _record(self, operation: str) -> None:
        self._call_log.append(operation)
        remaining = self._failures.get(operation, 0)
        if remaining > 0:
            self._failures[operation] = remaining - 1
            raise ProviderError(f"{operation}: {self._failure_message}")
