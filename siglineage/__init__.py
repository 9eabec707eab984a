"""
SigLineage — Signing-Lineage Trust Engine

Answers trust questions about a package's signing identity over time: is
this the same publisher as before, even after a key rotation, and does a
historical key still retain a given privilege?
"""

from siglineage.primitives.signing import (
    DEFAULT_CAPABILITIES,
    UNKNOWN,
    Capability,
    CapabilitySet,
    Identity,
    LineageEntry,
    LineageError,
    SchemeVersion,
    SigningIdentity,
)
from siglineage.systems.lineage.service import LineageEngine

__all__ = [
    "DEFAULT_CAPABILITIES",
    "UNKNOWN",
    "Capability",
    "CapabilitySet",
    "Identity",
    "LineageEngine",
    "LineageEntry",
    "LineageError",
    "SchemeVersion",
    "SigningIdentity",
]
