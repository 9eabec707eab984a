"""
SigLineage — Lineage Merge

Combines two partially-known rotation histories into the most complete
consistent one. Certificates known to both histories keep only the
capabilities both agree on. Irreconcilable histories are never merged; the
invoking identity comes back unchanged.

Inputs are never modified. When the merge adds nothing to one of the
inputs, that input object itself is returned, so callers can detect a
no-op with an identity check.
"""

from __future__ import annotations

from siglineage.primitives.signing import Lineage, LineageEntry, SigningIdentity
from siglineage.systems.lineage.alignment import Alignment, align, effective_lineage


def merge_lineages(first: Lineage, second: Lineage, alignment: Alignment) -> Lineage:
    """
    Union of two aligned lineages.

    The lineage aligned at a later offset contributes the entries before
    the overlap; whichever lineage runs past the overlap contributes the
    entries after it. Overlapping entries get the intersection of both
    recorded capability sets.
    """
    i, j, length = alignment
    prefix = first[:i] if i else second[:j]
    overlap = tuple(
        LineageEntry(
            identity=first[i + k].identity,
            capabilities=first[i + k].capabilities & second[j + k].capabilities,
        )
        for k in range(length)
    )
    suffix = first[i + length:] or second[j + length:]
    return prefix + overlap + suffix


def merge_lineage_with(signing: SigningIdentity, other: SigningIdentity) -> SigningIdentity:
    """Merge ``other``'s history into ``signing``'s."""
    if not signing.has_lineage:
        if (
            other.has_lineage
            and signing.signer is not None
            and any(entry.identity == signing.signer for entry in effective_lineage(other))
        ):
            return other
        return signing

    if not other.has_lineage:
        return signing

    alignment = align(signing.lineage, other.lineage)
    if alignment is None:
        return signing
    return merge_aligned(signing, other, alignment)


def merge_aligned(
    signing: SigningIdentity,
    other: SigningIdentity,
    alignment: Alignment,
) -> SigningIdentity:
    """Merge two histories already known to line up at ``alignment``."""
    merged = merge_lineages(signing.lineage, other.lineage, alignment)
    if merged == signing.lineage:
        return signing
    if merged == other.lineage:
        return other

    return SigningIdentity(
        current=frozenset({merged[-1].identity}),
        lineage=merged,
        scheme_version=signing.scheme_version,
    )
