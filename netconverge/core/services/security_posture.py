"""
Security posture convergence — find or create the cluster's security group
and make sure it admits all traffic from the VPC CIDR.

Convergence is two-phase.  A pass that creates the group stops there;
the ingress rule is added by the next pass, once the group is visible
in listings.  Callers re-invoke ``ensure`` periodically, and every pass
is idempotent:

    pass 1: group missing          → create group        (outcome=created)
    pass 2: group present, no rule → authorize ingress   (outcome=authorized)
    pass 3: group present, rule    → nothing             (outcome=unchanged)

Existing permissions are never removed or altered.  The membership test
is structural equality on the permission, not a "requested" flag, so a
rule is never authorized twice.

No locking: two callers converging the same cluster at once may both
see the group missing and both create it.  Callers that need
exclusivity must serialize externally.
"""

from __future__ import annotations

import logging
from typing import Any

from netconverge.adapters.base import NetworkProvider
from netconverge.core.errors import (
    ConfigurationError,
    ConvergenceError,
    ProviderError,
    wrap,
)
from netconverge.core.identity import ClusterIdentityProvider
from netconverge.core.models.network import IngressPermission, SecurityGroup
from netconverge.core.models.result import ConvergeResult
from netconverge.core.naming import DEFAULT_AWS_IDENTIFIER_LENGTH, build_resource_name
from netconverge.core.services.network_locator import NetworkLocator

logger = logging.getLogger(__name__)

DEFAULT_SECURITY_GROUP_POSTFIX = "security-group"


def find_security_group(groups: list[SecurityGroup], name: str) -> SecurityGroup | None:
    """First group whose name matches exactly, or None."""
    for group in groups:
        if group.name == name:
            return group
    return None


class SecurityPostureConverger:
    """Converges the cluster's security group toward the desired state.

    Args:
        provider: Network provider capability.
        identity: Source of the cluster id.
        locator: VPC locator. Built from ``provider`` and ``identity``
            when omitted.
        postfix: Appended to the cluster id to name the group.
        max_name_length: Provider limit on the group name.
    """

    def __init__(
        self,
        provider: NetworkProvider,
        identity: ClusterIdentityProvider,
        locator: NetworkLocator | None = None,
        postfix: str = DEFAULT_SECURITY_GROUP_POSTFIX,
        max_name_length: int = DEFAULT_AWS_IDENTIFIER_LENGTH,
    ):
        self.provider = provider
        self.identity = identity
        self.locator = locator or NetworkLocator(provider, identity)
        self.postfix = postfix
        self.max_name_length = max_name_length

    def ensure(self) -> ConvergeResult:
        """Run one convergence pass.

        Raises:
            ConfigurationError: Cluster id or group name unavailable.
            NotFoundError: The cluster VPC cannot be found.
            ProviderError: A listing or mutation failed.
        """
        logger.info("setting resource security group")
        try:
            cluster_id = self.identity.get_cluster_id()
        except ConvergenceError as e:
            raise ConfigurationError("error getting cluster id") from e

        try:
            group_name = build_resource_name(cluster_id, self.postfix, self.max_name_length)
        except ConvergenceError as e:
            raise ConfigurationError("error building security group name") from e

        try:
            domain_id, cidr = self.locator.domain_cidr()
        except ConvergenceError as e:
            raise wrap(e, "error finding cidr block") from e

        try:
            group = find_security_group(self.provider.list_security_groups(), group_name)
        except ConvergenceError as e:
            raise ProviderError("error getting security group") from e

        result = ConvergeResult(
            cluster_id=cluster_id,
            group_name=group_name,
            domain_id=domain_id,
            cidr=cidr,
        )

        if group is None:
            logger.info("creating security group %s for cluster %s", group_name, cluster_id)
            try:
                created = self.provider.create_security_group(
                    name=group_name,
                    description=f"security group for cluster {cluster_id}",
                    domain_id=domain_id,
                )
            except ConvergenceError as e:
                raise ProviderError("error creating security group") from e
            # Ingress is left for the next pass.
            result.group_id = created.id
            result.outcome = "created"
            return result

        result.group_id = group.id
        desired = IngressPermission.allow_all_from(cidr)

        if group.has_permission(desired):
            logger.info("ip permissions are correct for security group %s", group_name)
            return result

        logger.info("setting ingress ip permissions on %s", group.id)
        try:
            self.provider.authorize_ingress(group.id, [desired])
        except ConvergenceError as e:
            raise ProviderError("error authorizing security group ingress") from e

        result.outcome = "authorized"
        return result


def ensure_security_posture(
    provider: NetworkProvider,
    identity: ClusterIdentityProvider,
    **kwargs: Any,
) -> ConvergeResult:
    """One-shot convenience wrapper around ``SecurityPostureConverger``."""
    return SecurityPostureConverger(provider, identity, **kwargs).ensure()
