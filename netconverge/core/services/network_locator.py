"""
Network locator — resolve a cluster's VPC and subnets from tag metadata.

There is no structural link between a cluster and its VPC, only tags:
a VPC belongs to cluster ``X`` when any of its tag values is exactly
``X-vpc``.  This module owns that selection policy so every consumer
agrees on which VPC is "the cluster's".

Read-only.  VPCs are listed directly; subnets are listed through a
bounded poll, since subnet listing is the first call made with freshly
issued credentials.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from netconverge.adapters.base import NetworkProvider
from netconverge.core.errors import (
    AmbiguousMatchError,
    ConvergenceError,
    NotFoundError,
    ProviderError,
)
from netconverge.core.identity import ClusterIdentityProvider
from netconverge.core.models.network import NetworkDomain, Subnet
from netconverge.core.reliability.poll import PollPolicy, list_with_retry

logger = logging.getLogger(__name__)

VPC_TAG_SUFFIX = "-vpc"


class TieBreak(StrEnum):
    """What to do when more than one VPC carries the cluster's tag.

    ``last`` keeps the historical behaviour: the last VPC in listing
    order wins.
    """

    LAST = "last"
    FIRST = "first"
    ERROR = "error"


def vpc_tag_value(cluster_id: str) -> str:
    """Tag value that marks a VPC as belonging to ``cluster_id``."""
    return f"{cluster_id}{VPC_TAG_SUFFIX}"


def select_domain(
    domains: list[NetworkDomain],
    cluster_id: str,
    tie_break: TieBreak = TieBreak.LAST,
) -> NetworkDomain:
    """Pick the cluster's VPC out of a full listing.

    Raises:
        NotFoundError: No VPC carries the cluster tag.
        AmbiguousMatchError: Several do and ``tie_break`` is ``error``.
    """
    wanted = vpc_tag_value(cluster_id)
    matches = [d for d in domains if d.has_tag_value(wanted)]

    if not matches:
        raise NotFoundError(f"no vpc found with tag value {wanted}")

    if len(matches) > 1:
        ids = [d.id for d in matches]
        if tie_break == TieBreak.ERROR:
            raise AmbiguousMatchError(
                f"{len(matches)} vpcs tagged {wanted}: {', '.join(ids)}", candidates=ids
            )
        logger.warning(
            "Multiple vpcs tagged %s (%s), using %s match",
            wanted,
            ", ".join(ids),
            tie_break.value,
        )

    return matches[0] if tie_break == TieBreak.FIRST else matches[-1]


class NetworkLocator:
    """Resolves the cluster's VPC, CIDR and subnets.

    Args:
        provider: Network provider capability.
        identity: Source of the cluster id.
        poll_policy: Poll used for the subnet listing.
        tie_break: Policy when several VPCs match.
    """

    def __init__(
        self,
        provider: NetworkProvider,
        identity: ClusterIdentityProvider,
        poll_policy: PollPolicy | None = None,
        tie_break: TieBreak = TieBreak.LAST,
    ):
        self.provider = provider
        self.identity = identity
        self.poll_policy = poll_policy or PollPolicy()
        self.tie_break = tie_break

    def find_canonical_domain(self) -> NetworkDomain:
        """Return the VPC tagged for this cluster."""
        logger.info("finding cluster vpc")
        try:
            domains = self.provider.list_domains()
        except ConvergenceError as e:
            raise ProviderError("error listing vpcs") from e

        cluster_id = self.identity.get_cluster_id()
        return select_domain(domains, cluster_id, self.tie_break)

    def list_associated_subnets(self, deadline: float | None = None) -> list[Subnet]:
        """Return every subnet in the cluster's VPC.

        Raises:
            PollTimeoutError: The subnet listing never succeeded.
            NotFoundError: No cluster VPC, or it has no subnets.
        """
        logger.info("gathering cluster vpc and subnet information")
        subnets = list_with_retry(
            self.provider.list_subnets,
            policy=self.poll_policy,
            deadline=deadline,
            description="subnets",
        )

        domain = self.find_canonical_domain()

        associated = [s for s in subnets if s.domain_id == domain.id]
        if not associated:
            raise NotFoundError(f"no subnets associated with cluster vpc {domain.id}")
        return associated

    def list_subnet_ids(self, deadline: float | None = None) -> list[str]:
        """Ids of every subnet in the cluster's VPC."""
        logger.info("gathering all vpc subnets")
        return [s.id for s in self.list_associated_subnets(deadline=deadline)]

    def list_private_subnet_ids(self, deadline: float | None = None) -> list[str]:
        """Ids of the cluster's subnets tagged as private.

        Raises:
            NotFoundError: The VPC has subnets, but none are private.
        """
        logger.info("gathering private vpc subnets")
        subnets = self.list_associated_subnets(deadline=deadline)

        ids = [s.id for s in subnets if s.is_private()]
        if not ids:
            raise NotFoundError("no private subnets found in cluster vpc")
        return ids

    def domain_cidr(self) -> tuple[str, str]:
        """Return ``(vpc_id, cidr)`` of the cluster's VPC."""
        logger.info("gathering cidr block for cluster")
        domain = self.find_canonical_domain()
        return domain.id, domain.cidr
