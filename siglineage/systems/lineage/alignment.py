"""
SigLineage — Lineage Alignment

Decides whether two rotation histories could be the same timeline observed
at different points, and where they line up.

Alignment is anchored: the first entry of one lineage must match some entry
of the other, and every entry from there on must agree until one of the two
runs out. A common run of certificates that is not anchored this way (two
histories with different roots of trust, or a different signer somewhere in
the shared middle) is irreconcilable, since it can only come from key reuse
and never from one real rotation timeline.
"""

from __future__ import annotations

from typing import NamedTuple

from siglineage.primitives.signing import (
    Capability,
    Lineage,
    LineageEntry,
    SigningIdentity,
)


class Alignment(NamedTuple):
    """``first[self_offset:self_offset+length] == second[other_offset:other_offset+length]``."""

    self_offset: int
    other_offset: int
    length: int


def effective_lineage(signing: SigningIdentity) -> Lineage:
    """
    The lineage used for comparisons.

    The recorded lineage when there is real history, else a one-entry
    lineage of the sole current signer, which always holds every
    capability. Empty for UNKNOWN and co-signed identities.
    """
    if signing.has_lineage:
        return signing.lineage
    signer = signing.signer
    if signer is None:
        return ()
    return (LineageEntry(identity=signer, capabilities=Capability.ALL),)


def _matches_from(longer: Lineage, offset: int, shorter: Lineage) -> int | None:
    length = min(len(longer) - offset, len(shorter))
    for k in range(length):
        if longer[offset + k].identity != shorter[k].identity:
            return None
    return length


def align(first: Lineage, second: Lineage) -> Alignment | None:
    """
    Find the anchored overlap of two lineages, comparing identities only.

    Tries every position of ``first`` holding ``second``'s root, then every
    position of ``second`` holding ``first``'s root. The first consistent
    candidate wins. Returns None when the histories are irreconcilable.
    """
    if not first or not second:
        return None

    root = second[0].identity
    for i, entry in enumerate(first):
        if entry.identity == root:
            length = _matches_from(first, i, second)
            if length is not None:
                return Alignment(i, 0, length)

    root = first[0].identity
    for j, entry in enumerate(second):
        if entry.identity == root:
            length = _matches_from(second, j, first)
            if length is not None:
                return Alignment(0, j, length)

    return None
