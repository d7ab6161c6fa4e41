"""
EC2 network provider — boto3 bindings for VPCs, subnets and security groups.

Listings go through boto3 paginators and are mapped into the core
models.  Every botocore failure is re-raised as ``ProviderError`` with
the call that failed, the original exception chained.
"""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from netconverge.adapters.base import NetworkProvider
from netconverge.core.errors import ConfigurationError, ProviderError
from netconverge.core.models.network import (
    IngressPermission,
    IpRange,
    NetworkDomain,
    SecurityGroup,
    Subnet,
    Tag,
)

logger = logging.getLogger(__name__)


class Ec2NetworkProvider(NetworkProvider):
    """Network provider backed by the AWS EC2 API.

    Args:
        client: A boto3 ``ec2`` client. Created from the default session
            when omitted.
        region: Region for the default client.
    """

    def __init__(self, client: Any = None, region: str | None = None):
        if client is None:
            try:
                client = boto3.client("ec2", region_name=region)
            except BotoCoreError as e:
                raise ConfigurationError("cannot create ec2 client") from e
        self._client = client

    @property
    def name(self) -> str:
        return "ec2"

    # ── Listings ────────────────────────────────────────────────

    def list_domains(self) -> list[NetworkDomain]:
        return [
            NetworkDomain(
                id=vpc["VpcId"],
                cidr=vpc.get("CidrBlock", ""),
                tags=_tags(vpc),
            )
            for vpc in self._paginate("describe_vpcs", "Vpcs")
        ]

    def list_subnets(self) -> list[Subnet]:
        return [
            Subnet(id=sub["SubnetId"], domain_id=sub.get("VpcId", ""), tags=_tags(sub))
            for sub in self._paginate("describe_subnets", "Subnets")
        ]

    def list_security_groups(self) -> list[SecurityGroup]:
        return [
            SecurityGroup(
                id=sg["GroupId"],
                name=sg.get("GroupName", ""),
                domain_id=sg.get("VpcId", ""),
                description=sg.get("Description", ""),
                ingress=[_permission_from_api(p) for p in sg.get("IpPermissions", [])],
            )
            for sg in self._paginate("describe_security_groups", "SecurityGroups")
        ]

    # ── Mutations ───────────────────────────────────────────────

    def create_security_group(
        self, name: str, description: str, domain_id: str
    ) -> SecurityGroup:
        logger.debug("ec2 create_security_group name=%s vpc=%s", name, domain_id)
        try:
            resp = self._client.create_security_group(
                Description=description,
                GroupName=name,
                VpcId=domain_id,
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError(f"ec2 create_security_group failed for {name}") from e
        return SecurityGroup(
            id=resp["GroupId"],
            name=name,
            domain_id=domain_id,
            description=description,
        )

    def authorize_ingress(
        self, group_id: str, permissions: list[IngressPermission]
    ) -> None:
        logger.debug("ec2 authorize_security_group_ingress group=%s", group_id)
        try:
            self._client.authorize_security_group_ingress(
                GroupId=group_id,
                IpPermissions=[_permission_to_api(p) for p in permissions],
            )
        except (ClientError, BotoCoreError) as e:
            raise ProviderError(
                f"ec2 authorize_security_group_ingress failed for {group_id}"
            ) from e

    def _paginate(self, operation: str, key: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        try:
            paginator = self._client.get_paginator(operation)
            for page in paginator.paginate():
                items.extend(page.get(key, []))
        except (ClientError, BotoCoreError) as e:
            raise ProviderError(f"ec2 {operation} failed") from e
        logger.debug("ec2 %s returned %d items", operation, len(items))
        return items


# ── Mapping ─────────────────────────────────────────────────────


def _tags(resource: dict[str, Any]) -> list[Tag]:
    return [Tag(key=t.get("Key", ""), value=t.get("Value", "")) for t in resource.get("Tags", [])]


def _permission_from_api(perm: dict[str, Any]) -> IngressPermission:
    return IngressPermission(
        protocol=perm.get("IpProtocol", ""),
        ip_ranges=[
            IpRange(cidr=r["CidrIp"], description=r.get("Description"))
            for r in perm.get("IpRanges", [])
        ],
        from_port=perm.get("FromPort"),
        to_port=perm.get("ToPort"),
        ipv6_ranges=[r["CidrIpv6"] for r in perm.get("Ipv6Ranges", [])],
        prefix_list_ids=[p["PrefixListId"] for p in perm.get("PrefixListIds", [])],
        source_groups=[g["GroupId"] for g in perm.get("UserIdGroupPairs", []) if "GroupId" in g],
    )


def _permission_to_api(perm: IngressPermission) -> dict[str, Any]:
    ranges = []
    for r in perm.ip_ranges:
        entry = {"CidrIp": r.cidr}
        if r.description is not None:
            entry["Description"] = r.description
        ranges.append(entry)

    data: dict[str, Any] = {"IpProtocol": perm.protocol, "IpRanges": ranges}
    if perm.from_port is not None:
        data["FromPort"] = perm.from_port
    if perm.to_port is not None:
        data["ToPort"] = perm.to_port
    if perm.ipv6_ranges:
        data["Ipv6Ranges"] = [{"CidrIpv6": c} for c in perm.ipv6_ranges]
    if perm.prefix_list_ids:
        data["PrefixListIds"] = [{"PrefixListId": p} for p in perm.prefix_list_ids]
    if perm.source_groups:
        data["UserIdGroupPairs"] = [{"GroupId": g} for g in perm.source_groups]
    return data
