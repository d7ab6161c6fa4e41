"""
Resource naming — deterministic provider-safe names from a cluster id.

Names are ``<cluster_id>-<postfix>``, lowercased, with anything outside
``[a-z0-9-]`` replaced by ``-``.  Names longer than the provider limit
are truncated and suffixed with a short digest of the full name, so
two long cluster ids sharing a prefix still get distinct names.
"""

from __future__ import annotations

import hashlib
import re

from netconverge.core.errors import ConfigurationError

DEFAULT_AWS_IDENTIFIER_LENGTH = 40

_INVALID_CHARS = re.compile(r"[^a-z0-9-]+")
_DIGEST_LENGTH = 8
_MIN_LENGTH = _DIGEST_LENGTH + 2


def build_resource_name(
    cluster_id: str,
    postfix: str,
    max_length: int = DEFAULT_AWS_IDENTIFIER_LENGTH,
) -> str:
    """Build a provider resource name for a cluster.

    Raises:
        ConfigurationError: Empty cluster id or a limit too small to
            hold the digest suffix.
    """
    if not cluster_id:
        raise ConfigurationError("cannot build a resource name without a cluster id")
    if max_length < _MIN_LENGTH:
        raise ConfigurationError(
            f"max name length {max_length} is below the minimum of {_MIN_LENGTH}"
        )

    name = _INVALID_CHARS.sub("-", f"{cluster_id}-{postfix}".lower()).strip("-")
    if len(name) <= max_length:
        return name

    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    head = name[: max_length - _DIGEST_LENGTH - 1].rstrip("-")
    return f"{head}-{digest}"
