"""
Tests for resource naming and cluster identity providers.
"""

import pytest

from netconverge.core.errors import ConfigurationError, ErrorKind, IdentityUnavailableError
from netconverge.core.identity import EnvIdentityProvider, StaticIdentityProvider
from netconverge.core.naming import DEFAULT_AWS_IDENTIFIER_LENGTH, build_resource_name


class TestBuildResourceName:
    def test_short_name(self):
        assert build_resource_name("bar", "security-group") == "bar-security-group"

    def test_sanitizes(self):
        assert build_resource_name("My_Cluster.1", "security-group") == "my-cluster-1-security-group"

    def test_deterministic(self):
        a = build_resource_name("cluster-" + "x" * 60, "security-group")
        b = build_resource_name("cluster-" + "x" * 60, "security-group")
        assert a == b

    def test_truncates_to_limit(self):
        name = build_resource_name("cluster-" + "x" * 60, "security-group")
        assert len(name) <= DEFAULT_AWS_IDENTIFIER_LENGTH

    def test_long_names_stay_distinct(self):
        prefix = "cluster-" + "x" * 60
        a = build_resource_name(prefix + "a", "security-group")
        b = build_resource_name(prefix + "b", "security-group")
        assert a != b

    def test_empty_cluster_id(self):
        with pytest.raises(ConfigurationError):
            build_resource_name("", "security-group")

    def test_limit_too_small(self):
        with pytest.raises(ConfigurationError):
            build_resource_name("bar", "security-group", max_length=5)


class TestIdentityProviders:
    def test_static(self):
        assert StaticIdentityProvider("bar").get_cluster_id() == "bar"

    def test_static_empty(self):
        with pytest.raises(IdentityUnavailableError) as exc_info:
            StaticIdentityProvider("").get_cluster_id()
        assert exc_info.value.kind == ErrorKind.UNAVAILABLE

    def test_env(self, monkeypatch):
        monkeypatch.setenv("CLUSTER", " bar ")
        assert EnvIdentityProvider("CLUSTER").get_cluster_id() == "bar"

    def test_env_unset(self, monkeypatch):
        monkeypatch.delenv("CLUSTER", raising=False)
        with pytest.raises(IdentityUnavailableError):
            EnvIdentityProvider("CLUSTER").get_cluster_id()

    def test_env_read_on_every_call(self, monkeypatch):
        provider = EnvIdentityProvider("CLUSTER")
        monkeypatch.setenv("CLUSTER", "one")
        assert provider.get_cluster_id() == "one"
        monkeypatch.setenv("CLUSTER", "two")
        assert provider.get_cluster_id() == "two"
