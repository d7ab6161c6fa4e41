"""
Convergence result — what a single ``ensure`` pass did.

Modelled on a receipt: one record per pass, describing the outcome
rather than raising for the no-op case.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class ConvergeResult(BaseModel):
    """Outcome of one security posture convergence pass.

    ``created`` means the group did not exist and was created; the
    ingress rule is left for the next pass.  ``authorized`` means the
    desired rule was added.  ``unchanged`` means nothing was mutated.
    """

    cluster_id: str
    group_name: str
    domain_id: str
    cidr: str
    group_id: str | None = None
    outcome: Literal["created", "authorized", "unchanged"] = "unchanged"
    finished_at: str = Field(default_factory=_now_iso)

    @property
    def mutated(self) -> bool:
        """Whether this pass issued a mutating provider call."""
        return self.outcome != "unchanged"

    @property
    def converged(self) -> bool:
        """Whether the desired state held at the end of this pass."""
        return self.outcome in ("authorized", "unchanged")

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        data["converged"] = self.converged
        return data
