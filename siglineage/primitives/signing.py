"""
SigLineage — Signing Identity Primitives

The data model for a package's signing identity over time.

An Identity is one certificate's encoded bytes. A SigningIdentity holds the
certificate(s) currently signing a package and, for a single signer that
has rotated its key, the lineage of certificates that led to it, oldest
first. Every historical entry carries the capabilities the current signer
still grants to that older certificate.

Co-signed packages (more than one current certificate) can never rotate,
so they never carry a lineage. A lineage of one entry says nothing beyond
the current signer and is normalised away on construction.
"""

from __future__ import annotations

import enum
import hashlib
from functools import reduce
from typing import TYPE_CHECKING, Any

from pydantic import Field, field_validator, model_serializer, model_validator

from siglineage.primitives.common import SigLineageBaseModel

if TYPE_CHECKING:
    from collections.abc import Iterable


class LineageError(ValueError):
    """A signing identity or lineage document violates a structural invariant."""


# ─── Capabilities ────────────────────────────────────────────────


class Capability(enum.IntFlag):
    """Privileges a historical signing certificate may retain."""

    NONE = 0
    INSTALLED_DATA = 1       # Keep app data across the rotation
    SHARED_USER_ID = 2       # Join a shared user ID
    PERMISSION = 4           # Be granted signature permissions
    ROLLBACK = 8             # Install over the rotated package
    AUTH = 16                # Authenticate as the package
    ALL = INSTALLED_DATA | SHARED_USER_ID | PERMISSION | ROLLBACK | AUTH


# A capability set is a bitmask over Capability.
CapabilitySet = Capability

DEFAULT_CAPABILITIES = (
    Capability.INSTALLED_DATA
    | Capability.SHARED_USER_ID
    | Capability.PERMISSION
    | Capability.AUTH
)


def grants_all(granted: Capability, requested: Capability) -> bool:
    """True if every bit in ``requested`` is present in ``granted``."""
    return (granted & requested) == requested


def parse_capabilities(value: Any) -> Capability:
    """
    Coerce a document value into a Capability.

    Accepts a Capability, a non-negative int within Capability.ALL, a flag
    name, or a list of flag names.
    """
    if isinstance(value, Capability):
        return value
    if isinstance(value, bool):
        raise ValueError("Capabilities must be an int or flag names, not a bool")
    if isinstance(value, int):
        if value < 0 or value & ~int(Capability.ALL):
            raise ValueError(f"Unknown capability bits in {value:#x}")
        return Capability(value)
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        flags: list[Capability] = []
        for name in value:
            try:
                flags.append(Capability[str(name).strip().upper()])
            except KeyError:
                raise ValueError(f"Unknown capability: {name}") from None
        return reduce(lambda acc, flag: acc | flag, flags, Capability.NONE)
    raise ValueError(f"Cannot interpret {type(value).__name__} as capabilities")


class SchemeVersion(enum.IntEnum):
    """Signature scheme the signing material was read from. Provenance only."""

    UNKNOWN = 0
    JAR = 1
    SIGNING_BLOCK_V2 = 2
    SIGNING_BLOCK_V3 = 3
    SIGNING_BLOCK_V4 = 4


# ─── Identity ────────────────────────────────────────────────────


class Identity(SigLineageBaseModel):
    """
    The public identity of one signing certificate.

    Opaque encoded bytes, compared by content. Certificate decoding lives in
    siglineage.systems.identity.certificate; nothing here parses the bytes.
    """

    encoded: bytes

    @model_validator(mode="before")
    @classmethod
    def _wrap_raw(cls, data: Any) -> Any:
        if isinstance(data, (str, bytes, bytearray)):
            return {"encoded": data}
        if isinstance(data, int):
            # YAML reads unquoted all-digit hex such as 1234 as a number.
            raise ValueError(f"Identities must be quoted hex strings, got the number {data}")
        return data

    @field_validator("encoded", mode="before")
    @classmethod
    def _decode_hex(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                value = bytes.fromhex(value)
            except ValueError as exc:
                raise ValueError(f"Identity must be hex-encoded: {exc}") from exc
        if isinstance(value, bytearray):
            value = bytes(value)
        if isinstance(value, bytes) and not value:
            raise ValueError("Identity bytes must not be empty")
        return value

    @model_serializer
    def _encode_hex(self) -> str:
        return self.encoded.hex()

    @classmethod
    def from_hex(cls, hex_string: str) -> Identity:
        return cls(encoded=hex_string)

    def digest(self, algorithm: str = "sha256") -> str:
        """Lowercase hex digest of the encoded certificate."""
        return hashlib.new(algorithm, self.encoded).hexdigest()

    @property
    def short(self) -> str:
        """Digest prefix for log output."""
        return self.digest()[:16]

    def __repr__(self) -> str:
        return f"Identity({self.encoded.hex()[:16]})"


# ─── Lineage ─────────────────────────────────────────────────────


class LineageEntry(SigLineageBaseModel):
    """One certificate in a rotation history and what it is still trusted for."""

    identity: Identity
    capabilities: Capability = Capability.NONE

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (tuple, list)) and len(data) == 2:
            return {"identity": data[0], "capabilities": data[1]}
        if isinstance(data, (str, bytes, bytearray, int, Identity)):
            return {"identity": data}
        return data

    @field_validator("capabilities", mode="before")
    @classmethod
    def _parse_capabilities(cls, value: Any) -> Capability:
        return parse_capabilities(value)


Lineage = tuple[LineageEntry, ...]


# ─── Signing Identity ────────────────────────────────────────────


class SigningIdentity(SigLineageBaseModel):
    """
    Everything known about who signs a package.

    ``current`` is the set of certificates signing the package now.
    ``lineage`` is the rotation history ending at the sole current
    certificate, or empty when there is no history worth recording.
    """

    current: frozenset[Identity] = Field(default_factory=frozenset)
    lineage: tuple[LineageEntry, ...] = ()
    scheme_version: SchemeVersion = SchemeVersion.UNKNOWN

    @model_validator(mode="after")
    def _check_lineage(self) -> SigningIdentity:
        if self.lineage and not self.current:
            raise LineageError("A lineage requires a current signer")

        if len(self.current) > 1 and self.lineage:
            if len(self.lineage) > 1:
                raise LineageError("Co-signed identities cannot carry a rotation lineage")
            if self.lineage[0].identity not in self.current:
                raise LineageError("Lineage entry is not one of the current signers")

        if len(self.current) == 1 and self.lineage:
            if self.lineage[-1].identity != self.signer:
                raise LineageError(
                    "The last lineage entry must be the current signer, "
                    f"got {self.lineage[-1].identity!r} for {self.signer!r}"
                )

        if len(self.lineage) == 1:
            object.__setattr__(self, "lineage", ())
        return self

    # ─── Construction ───────────────────────────────────────────────

    @classmethod
    def of(
        cls,
        *identities: Identity | str | bytes,
        scheme_version: SchemeVersion = SchemeVersion.SIGNING_BLOCK_V3,
    ) -> SigningIdentity:
        """Signing identity with the given current signers and no history."""
        return cls(current=frozenset(identities), scheme_version=scheme_version)

    @classmethod
    def from_lineage(
        cls,
        entries: Iterable[LineageEntry | tuple[Any, Any]],
        scheme_version: SchemeVersion = SchemeVersion.SIGNING_BLOCK_V3,
    ) -> SigningIdentity:
        """Signing identity whose current signer is the newest lineage entry."""
        lineage = tuple(
            entry if isinstance(entry, LineageEntry) else LineageEntry.model_validate(entry)
            for entry in entries
        )
        if not lineage:
            raise LineageError("A lineage needs at least one entry")
        return cls(
            current=frozenset({lineage[-1].identity}),
            lineage=lineage,
            scheme_version=scheme_version,
        )

    # ─── Properties ─────────────────────────────────────────────────

    @property
    def signer(self) -> Identity | None:
        """The sole current signer, or None for UNKNOWN and co-signed identities."""
        if len(self.current) != 1:
            return None
        return next(iter(self.current))

    @property
    def is_unknown(self) -> bool:
        return not self.current

    @property
    def is_cosigned(self) -> bool:
        return len(self.current) > 1

    @property
    def has_lineage(self) -> bool:
        return len(self.lineage) > 1

    # ─── Queries ────────────────────────────────────────────────────

    def has_ancestor(self, other: SigningIdentity) -> bool:
        from siglineage.systems.lineage.ancestry import has_ancestor

        return has_ancestor(self, other)

    def has_common_ancestor(self, other: SigningIdentity) -> bool:
        from siglineage.systems.lineage.ancestry import has_common_ancestor

        return has_common_ancestor(self, other)

    def has_common_signer_with_capability(
        self,
        other: SigningIdentity,
        requested: Capability,
    ) -> bool:
        from siglineage.systems.lineage.capability import has_common_signer_with_capability

        return has_common_signer_with_capability(self, other, requested)

    def merge_lineage_with(self, other: SigningIdentity) -> SigningIdentity:
        from siglineage.systems.lineage.merge import merge_lineage_with

        return merge_lineage_with(self, other)

    def has_ancestor_or_self_with_digest(self, digests: set[str] | frozenset[str] | None) -> bool:
        from siglineage.systems.lineage.digest import has_ancestor_or_self_with_digest

        return has_ancestor_or_self_with_digest(self, digests)


UNKNOWN = SigningIdentity()
