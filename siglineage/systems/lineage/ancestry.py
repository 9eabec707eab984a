"""
SigLineage — Ancestry Queries

"Is this the same publisher as before?" Both queries treat UNKNOWN as
unrelated to everything, and fall back to exact signer-set equality as soon
as either side is co-signed, since co-signed identities have no history to
reason about.
"""

from __future__ import annotations

from siglineage.primitives.signing import SigningIdentity
from siglineage.systems.lineage.alignment import align, effective_lineage


def signatures_match_exactly(first: SigningIdentity, second: SigningIdentity) -> bool:
    """True if both identities are signed by exactly the same set of certificates."""
    if first.is_unknown or second.is_unknown:
        return False
    return first.current == second.current


def has_ancestor(signing: SigningIdentity, other: SigningIdentity) -> bool:
    """
    True if ``other`` is an earlier point of ``signing``'s rotation history.

    ``other``'s effective lineage must be a strictly shorter prefix of
    ``signing``'s, so an identity is never its own ancestor.
    """
    if signing.is_unknown or other.is_unknown:
        return False
    if signing.is_cosigned or other.is_cosigned:
        return signatures_match_exactly(signing, other)

    descendant = effective_lineage(signing)
    ancestor = effective_lineage(other)
    if len(ancestor) >= len(descendant):
        return False
    return all(
        mine.identity == theirs.identity
        for mine, theirs in zip(descendant, ancestor)
    )


def has_common_ancestor(signing: SigningIdentity, other: SigningIdentity) -> bool:
    """True if the two histories could be segments of one rotation timeline."""
    if signing.is_unknown or other.is_unknown:
        return False
    if signing.is_cosigned or other.is_cosigned:
        return signatures_match_exactly(signing, other)
    return align(effective_lineage(signing), effective_lineage(other)) is not None
