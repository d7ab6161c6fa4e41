"""
Tests for the network locator — VPC selection, subnet filtering, CIDR lookup.
"""

import pytest

from netconverge.adapters.mock import InMemoryNetworkProvider
from netconverge.core.errors import (
    AmbiguousMatchError,
    ErrorKind,
    IdentityUnavailableError,
    NotFoundError,
    PollTimeoutError,
    ProviderError,
)
from netconverge.core.identity import EnvIdentityProvider, StaticIdentityProvider
from netconverge.core.services.network_locator import (
    NetworkLocator,
    TieBreak,
    select_domain,
    vpc_tag_value,
)

from tests.fakes import make_domain, make_subnet


@pytest.fixture
def locator(provider, identity, poll_policy) -> NetworkLocator:
    return NetworkLocator(provider, identity, poll_policy=poll_policy)


# ── VPC selection ───────────────────────────────────────────────────


class TestSelectDomain:
    def test_tag_value(self):
        assert vpc_tag_value("bar") == "bar-vpc"

    def test_matches_on_tag_value(self):
        domains = [
            make_domain("vpc-1", Name="foo-vpc"),
            make_domain("vpc-2", Name="bar-vpc"),
        ]
        assert select_domain(domains, "bar").id == "vpc-2"

    def test_any_tag_key_matches(self):
        domains = [make_domain("vpc-1", Name="other", Cluster="bar-vpc")]
        assert select_domain(domains, "bar").id == "vpc-1"

    def test_tag_key_alone_does_not_match(self):
        domains = [make_domain("vpc-1", **{"bar-vpc": "owned"})]
        with pytest.raises(NotFoundError):
            select_domain(domains, "bar")

    def test_substring_does_not_match(self):
        domains = [make_domain("vpc-1", Name="foobar-vpc")]
        with pytest.raises(NotFoundError):
            select_domain(domains, "bar")

    def test_no_match_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            select_domain([make_domain("vpc-1", Name="foo-vpc")], "bar")
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_empty_listing_is_not_found(self):
        with pytest.raises(NotFoundError):
            select_domain([], "bar")

    def test_last_match_wins_by_default(self):
        domains = [
            make_domain("vpc-1", Name="bar-vpc"),
            make_domain("vpc-2", Name="bar-vpc"),
        ]
        assert select_domain(domains, "bar").id == "vpc-2"

    def test_first_match_policy(self):
        domains = [
            make_domain("vpc-1", Name="bar-vpc"),
            make_domain("vpc-2", Name="bar-vpc"),
        ]
        assert select_domain(domains, "bar", TieBreak.FIRST).id == "vpc-1"

    def test_error_policy_on_collision(self):
        domains = [
            make_domain("vpc-1", Name="bar-vpc"),
            make_domain("vpc-2", Name="bar-vpc"),
        ]
        with pytest.raises(AmbiguousMatchError) as exc_info:
            select_domain(domains, "bar", TieBreak.ERROR)
        assert exc_info.value.candidates == ["vpc-1", "vpc-2"]
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    def test_error_policy_single_match(self):
        domains = [make_domain("vpc-1", Name="bar-vpc")]
        assert select_domain(domains, "bar", TieBreak.ERROR).id == "vpc-1"


class TestFindCanonicalDomain:
    def test_finds_cluster_vpc(self, locator):
        assert locator.find_canonical_domain().id == "vpc-bar"

    def test_not_found_for_unknown_cluster(self, provider, poll_policy):
        locator = NetworkLocator(provider, StaticIdentityProvider("baz"), poll_policy=poll_policy)
        with pytest.raises(NotFoundError):
            locator.find_canonical_domain()

    def test_listing_not_retried(self, provider, locator):
        provider.set_failure("list_domains")
        with pytest.raises(ProviderError) as exc_info:
            locator.find_canonical_domain()
        assert "error listing vpcs" in exc_info.value.describe()
        assert provider.call_log.count("list_domains") == 1

    def test_identity_unavailable(self, provider, poll_policy, monkeypatch):
        monkeypatch.delenv("NETCONVERGE_CLUSTER_ID", raising=False)
        locator = NetworkLocator(provider, EnvIdentityProvider(), poll_policy=poll_policy)
        with pytest.raises(IdentityUnavailableError):
            locator.find_canonical_domain()

    def test_reads_identity_from_env(self, provider, poll_policy, monkeypatch):
        monkeypatch.setenv("NETCONVERGE_CLUSTER_ID", "foo")
        locator = NetworkLocator(provider, EnvIdentityProvider(), poll_policy=poll_policy)
        assert locator.find_canonical_domain().id == "vpc-foo"


# ── Subnets ─────────────────────────────────────────────────────────


class TestAssociatedSubnets:
    def test_filters_by_vpc(self, locator):
        subnets = locator.list_associated_subnets()
        assert [s.id for s in subnets] == ["subnet-a", "subnet-b"]

    def test_all_subnet_ids(self, locator):
        assert locator.list_subnet_ids() == ["subnet-a", "subnet-b"]

    def test_vpc_without_subnets_is_not_found(self, identity, poll_policy):
        provider = InMemoryNetworkProvider(
            domains=[make_domain("vpc-bar", Name="bar-vpc")],
            subnets=[make_subnet("subnet-x", "vpc-other")],
        )
        locator = NetworkLocator(provider, identity, poll_policy=poll_policy)
        with pytest.raises(NotFoundError) as exc_info:
            locator.list_associated_subnets()
        assert "vpc-bar" in str(exc_info.value)

    def test_missing_vpc_is_not_found(self, poll_policy):
        provider = InMemoryNetworkProvider(subnets=[make_subnet("subnet-x", "vpc-bar")])
        locator = NetworkLocator(provider, StaticIdentityProvider("bar"), poll_policy=poll_policy)
        with pytest.raises(NotFoundError):
            locator.list_associated_subnets()

    def test_subnet_listing_polled_through_failures(self, provider, locator, clock):
        provider.set_failure("list_subnets", times=3)
        assert locator.list_subnet_ids() == ["subnet-a", "subnet-b"]
        assert provider.call_log.count("list_subnets") == 4
        assert clock.sleeps == [5.0, 5.0, 5.0]

    def test_subnet_listing_times_out(self, provider, locator):
        provider.set_failure("list_subnets", times=1000)
        with pytest.raises(PollTimeoutError) as exc_info:
            locator.list_associated_subnets()
        assert isinstance(exc_info.value.last_error, ProviderError)
        assert "list_domains" not in provider.call_log

    def test_expired_deadline_skips_listing(self, provider, locator, clock):
        with pytest.raises(PollTimeoutError):
            locator.list_associated_subnets(deadline=clock.now - 1)
        assert provider.call_log == []


class TestPrivateSubnets:
    def test_only_private_subnets(self, locator):
        assert locator.list_private_subnet_ids() == ["subnet-a"]

    def test_any_private_tag_is_enough(self, identity, poll_policy):
        provider = InMemoryNetworkProvider(
            domains=[make_domain("vpc-bar", Name="bar-vpc")],
            subnets=[
                make_subnet("subnet-a", "vpc-bar", Name="cluster-public-a", Tier="private"),
                make_subnet("subnet-b", "vpc-bar", Name="cluster-public-b"),
            ],
        )
        locator = NetworkLocator(provider, identity, poll_policy=poll_policy)
        assert locator.list_private_subnet_ids() == ["subnet-a"]

    def test_subnet_listed_once_with_several_private_tags(self, identity, poll_policy):
        provider = InMemoryNetworkProvider(
            domains=[make_domain("vpc-bar", Name="bar-vpc")],
            subnets=[
                make_subnet("subnet-a", "vpc-bar", Name="bar-private-a", Tier="private"),
            ],
        )
        locator = NetworkLocator(provider, identity, poll_policy=poll_policy)
        assert locator.list_private_subnet_ids() == ["subnet-a"]

    def test_case_sensitive(self, identity, poll_policy):
        provider = InMemoryNetworkProvider(
            domains=[make_domain("vpc-bar", Name="bar-vpc")],
            subnets=[make_subnet("subnet-a", "vpc-bar", Name="cluster-Private-a")],
        )
        locator = NetworkLocator(provider, identity, poll_policy=poll_policy)
        with pytest.raises(NotFoundError):
            locator.list_private_subnet_ids()

    def test_no_private_subnets_is_not_found(self, identity, poll_policy):
        provider = InMemoryNetworkProvider(
            domains=[make_domain("vpc-bar", Name="bar-vpc")],
            subnets=[make_subnet("subnet-b", "vpc-bar", Name="cluster-public-a")],
        )
        locator = NetworkLocator(provider, identity, poll_policy=poll_policy)
        with pytest.raises(NotFoundError):
            locator.list_private_subnet_ids()


class TestDomainCidr:
    def test_returns_id_and_cidr(self, locator):
        assert locator.domain_cidr() == ("vpc-bar", "10.0.0.0/16")
