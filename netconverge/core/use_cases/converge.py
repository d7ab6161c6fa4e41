"""
Converge use case — wire config, identity and provider into the services.

The CLI builds one ``ConvergeSession`` per invocation.  Nothing here is
cached between invocations; each operation re-lists from the provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from netconverge.adapters.base import NetworkProvider
from netconverge.adapters.mock import InMemoryNetworkProvider
from netconverge.core.config.loader import ConvergeConfig, load_config
from netconverge.core.identity import (
    ClusterIdentityProvider,
    EnvIdentityProvider,
    StaticIdentityProvider,
)
from netconverge.core.models.network import NetworkDomain, Subnet, Tag
from netconverge.core.reliability.poll import PollPolicy
from netconverge.core.services.network_locator import NetworkLocator, vpc_tag_value
from netconverge.core.services.security_posture import SecurityPostureConverger

logger = logging.getLogger(__name__)

MOCK_CLUSTER_ID = "demo"
MOCK_VPC_CIDR = "10.0.0.0/16"


@dataclass
class ConvergeSession:
    """Services for one CLI invocation."""

    config: ConvergeConfig
    provider: NetworkProvider
    identity: ClusterIdentityProvider
    locator: NetworkLocator
    converger: SecurityPostureConverger


def build_identity(config: ConvergeConfig) -> ClusterIdentityProvider:
    """Configured cluster id if set, otherwise the environment."""
    if config.cluster_id:
        return StaticIdentityProvider(config.cluster_id)
    return EnvIdentityProvider()


def build_mock_provider(cluster_id: str) -> InMemoryNetworkProvider:
    """In-memory provider holding one tagged VPC with a public and a private subnet."""
    return InMemoryNetworkProvider(
        domains=[
            NetworkDomain(
                id="vpc-mock",
                cidr=MOCK_VPC_CIDR,
                tags=[Tag(key="Name", value=vpc_tag_value(cluster_id))],
            ),
        ],
        subnets=[
            Subnet(
                id="subnet-mock-private",
                domain_id="vpc-mock",
                tags=[Tag(key="Name", value=f"{cluster_id}-private-a")],
            ),
            Subnet(
                id="subnet-mock-public",
                domain_id="vpc-mock",
                tags=[Tag(key="Name", value=f"{cluster_id}-public-a")],
            ),
        ],
    )


def build_session(
    config_path: Path | None = None,
    mock: bool = False,
    provider: NetworkProvider | None = None,
) -> ConvergeSession:
    """Load config and assemble the provider and services.

    Raises:
        ConfigError: Invalid configuration file.
    """
    config = load_config(config_path)
    identity = build_identity(config)

    if provider is None:
        if mock:
            cluster_id = config.cluster_id or MOCK_CLUSTER_ID
            identity = StaticIdentityProvider(cluster_id)
            provider = build_mock_provider(cluster_id)
        else:
            from netconverge.adapters.ec2 import Ec2NetworkProvider

            provider = Ec2NetworkProvider(region=config.region)
    logger.debug("Using provider %r", provider)

    locator = NetworkLocator(
        provider,
        identity,
        poll_policy=PollPolicy(interval=config.poll.interval, timeout=config.poll.timeout),
        tie_break=config.tie_break,
    )
    converger = SecurityPostureConverger(
        provider,
        identity,
        locator=locator,
        postfix=config.security_group_postfix,
        max_name_length=config.max_name_length,
    )
    return ConvergeSession(
        config=config,
        provider=provider,
        identity=identity,
        locator=locator,
        converger=converger,
    )
