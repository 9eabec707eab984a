"""
SigLineage — Digest Membership

Tests a signing identity, current or historical, against a set of trusted
certificate digests (for example an allow-list published by policy).
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from siglineage.primitives.signing import Identity, SigningIdentity

DEFAULT_DIGEST_ALGORITHM = "sha256"


def compute_digest_set(
    identities: Iterable[Identity],
    algorithm: str = DEFAULT_DIGEST_ALGORITHM,
) -> frozenset[str]:
    """Digest set for the given certificates."""
    return frozenset(identity.digest(algorithm) for identity in identities)


def has_ancestor_or_self_with_digest(
    signing: SigningIdentity,
    digests: Collection[str] | None,
    algorithm: str = DEFAULT_DIGEST_ALGORITHM,
) -> bool:
    """
    True if ``signing`` is, or has been, signed by a certificate in ``digests``.

    Co-signed identities need every current signer in the set; there is no
    history to fall back on. A single signer matches on its current
    certificate or on any certificate in its lineage.
    """
    if digests is None or signing.is_unknown:
        return False

    if signing.is_cosigned:
        if len(digests) < len(signing.current):
            return False
        return all(identity.digest(algorithm) in digests for identity in signing.current)

    assert signing.signer is not None
    if signing.signer.digest(algorithm) in digests:
        return True
    return any(entry.identity.digest(algorithm) in digests for entry in signing.lineage)


def has_digest(
    signing: SigningIdentity,
    digest: str,
    algorithm: str = DEFAULT_DIGEST_ALGORITHM,
) -> bool:
    """Single-digest form of has_ancestor_or_self_with_digest."""
    return has_ancestor_or_self_with_digest(signing, {digest}, algorithm)
