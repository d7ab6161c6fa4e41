"""
Network models — the provider's view of VPCs, subnets and security groups.

These are read-only projections of provider resources.  The provider
owns them; the convergence core only reads them, apart from the one
security group it creates and the one ingress rule it authorizes.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

# Any tag value containing "private" as part of a word, e.g. "cluster-private-a"
PRIVATE_TAG_PATTERN = re.compile(r"\b(\w*private\w*)\b")

# Provider wildcard for "all protocols"
ALL_PROTOCOLS = "-1"


class Tag(BaseModel):
    """A key/value resource tag."""

    key: str
    value: str = ""


class NetworkDomain(BaseModel):
    """An isolated virtual network (VPC) with its address range."""

    id: str
    cidr: str
    tags: list[Tag] = Field(default_factory=list)

    def tag_values(self) -> list[str]:
        return [t.value for t in self.tags]

    def has_tag_value(self, value: str) -> bool:
        """Whether any tag carries exactly this value."""
        return any(t.value == value for t in self.tags)


class Subnet(BaseModel):
    """A subnet, owned by exactly one network domain."""

    id: str
    domain_id: str
    tags: list[Tag] = Field(default_factory=list)

    def is_private(self) -> bool:
        """Whether any tag value contains the word ``private``.

        Case-sensitive.  One matching tag is enough, whatever the others say.
        """
        return any(PRIVATE_TAG_PATTERN.search(t.value) for t in self.tags)


class IpRange(BaseModel):
    """A source address range on an ingress permission."""

    cidr: str
    description: str | None = None


class IngressPermission(BaseModel):
    """An inbound rule: protocol, source ranges and an optional port range.

    Equality is structural: two permissions are equal only when every
    field matches, including range order.  No CIDR containment logic.
    """

    protocol: str
    ip_ranges: list[IpRange] = Field(default_factory=list)
    from_port: int | None = None
    to_port: int | None = None
    ipv6_ranges: list[str] = Field(default_factory=list)
    prefix_list_ids: list[str] = Field(default_factory=list)
    source_groups: list[str] = Field(default_factory=list)

    @classmethod
    def allow_all_from(cls, cidr: str) -> IngressPermission:
        """All protocols, all ports, from a single CIDR."""
        return cls(protocol=ALL_PROTOCOLS, ip_ranges=[IpRange(cidr=cidr)])

    @property
    def cidrs(self) -> list[str]:
        return [r.cidr for r in self.ip_ranges]


class SecurityGroup(BaseModel):
    """A named set of ingress rules attached to a network domain."""

    id: str
    name: str
    domain_id: str = ""
    description: str = ""
    ingress: list[IngressPermission] = Field(default_factory=list)

    def has_permission(self, permission: IngressPermission) -> bool:
        """Structural membership test against existing ingress rules."""
        desired = permission.model_dump()
        return any(existing.model_dump() == desired for existing in self.ingress)
