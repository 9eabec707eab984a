"""
SigLineage — Capability Resolution

"Does a historical key still retain this privilege?"

The identity a query is invoked on is the declaring side: it alone decides
what it still grants to its own history. Its current signer holds every
capability. An older certificate in its lineage holds exactly the bits
recorded on that entry. The counterpart's recorded bits only identify which
certificates it has been signed with; they never grant anything.

A request is satisfied by a single certificate granting every requested
bit. Bits granted by different certificates are never combined.
"""

from __future__ import annotations

from siglineage.primitives.signing import (
    Capability,
    Identity,
    SigningIdentity,
    grants_all,
)
from siglineage.systems.lineage.alignment import effective_lineage
from siglineage.systems.lineage.ancestry import signatures_match_exactly


def has_common_signer_with_capability(
    signing: SigningIdentity,
    other: SigningIdentity,
    requested: Capability,
) -> bool:
    """
    True if ``other`` has been signed by a certificate that ``signing``
    still trusts for all of ``requested``.

    The two identities may have diverged after their last shared rotation;
    any certificate they share can carry the grant.
    """
    if signing.is_unknown or other.is_unknown:
        return False
    if signing.is_cosigned or other.is_cosigned:
        return signatures_match_exactly(signing, other)

    shared = {entry.identity for entry in effective_lineage(other)}
    if signing.signer in shared:
        return True

    return any(
        entry.identity in shared and grants_all(entry.capabilities, requested)
        for entry in signing.lineage[:-1]
    )


def has_certificate(
    signing: SigningIdentity,
    identity: Identity,
    capabilities: Capability | None = None,
) -> bool:
    """
    True if ``identity`` currently signs ``signing``, or is an older
    certificate in its lineage granted all of ``capabilities``.

    With ``capabilities`` of None any lineage entry counts. For co-signed
    identities only the current signers count.
    """
    if signing.is_unknown:
        return False
    if signing.is_cosigned:
        return identity in signing.current
    if identity == signing.signer:
        return True
    return any(
        entry.identity == identity
        and (capabilities is None or grants_all(entry.capabilities, capabilities))
        for entry in signing.lineage[:-1]
    )


def check_capability(
    signing: SigningIdentity,
    old: SigningIdentity,
    capabilities: Capability,
) -> bool:
    """True if ``signing`` trusts ``old``'s signer for all of ``capabilities``."""
    if signing.is_unknown or old.is_unknown:
        return False
    if signing.is_cosigned or old.is_cosigned:
        return signatures_match_exactly(signing, old)
    assert old.signer is not None
    return has_certificate(signing, old.signer, capabilities)
