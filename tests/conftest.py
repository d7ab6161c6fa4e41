"""
Shared test fixtures and configuration.
"""

import pytest

from netconverge.adapters.mock import InMemoryNetworkProvider
from netconverge.core.identity import StaticIdentityProvider
from netconverge.core.reliability.poll import PollPolicy

from tests.fakes import FakeClock, make_domain, make_subnet


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def poll_policy(clock: FakeClock) -> PollPolicy:
    return PollPolicy(interval=5.0, timeout=300.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def identity() -> StaticIdentityProvider:
    return StaticIdentityProvider("bar")


@pytest.fixture
def provider() -> InMemoryNetworkProvider:
    """Two VPCs; the cluster's holds one private and one public subnet."""
    return InMemoryNetworkProvider(
        domains=[
            make_domain("vpc-foo", "172.16.0.0/16", Name="foo-vpc"),
            make_domain("vpc-bar", "10.0.0.0/16", Name="bar-vpc"),
        ],
        subnets=[
            make_subnet("subnet-a", "vpc-bar", Name="cluster-private-a"),
            make_subnet("subnet-b", "vpc-bar", Name="cluster-public-a"),
            make_subnet("subnet-c", "vpc-foo", Name="foo-private-a"),
        ],
    )
