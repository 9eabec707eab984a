"""
SigLineage — Lineage Engine

The entry point the install and permission subsystems call. Wraps the pure
lineage queries with configuration (digest algorithm) and structured
decision logging.

The engine holds no mutable state beyond its configuration, so a single
instance may be shared freely across threads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from siglineage.config import LineageConfig
from siglineage.systems.lineage import ancestry, capability, digest, merge
from siglineage.systems.lineage.alignment import align

if TYPE_CHECKING:
    from collections.abc import Collection

    from siglineage.primitives.signing import Capability, Identity, SigningIdentity

logger = structlog.get_logger("siglineage.systems.lineage.service")


def _describe(signing: SigningIdentity) -> dict[str, Any]:
    if signing.is_unknown:
        return {"kind": "unknown"}
    return {
        "signers": sorted(identity.short for identity in signing.current),
        "lineage_length": len(signing.lineage),
    }


class LineageEngine:
    """
    Answers signing-lineage trust questions.

    Queries:
      - has_ancestor                       -- strict ancestor in one timeline
      - has_common_ancestor                -- histories could be one timeline
      - has_common_signer_with_capability  -- shared signer still granted a capability
      - merge_lineage_with                 -- most complete consistent history
      - has_ancestor_or_self_with_digest   -- current or past signer in a digest set
    """

    def __init__(self, config: LineageConfig | None = None) -> None:
        self._config = config or LineageConfig()
        self._logger = logger.bind(component="lineage_engine")

    @property
    def config(self) -> LineageConfig:
        return self._config

    def _decision(self, query: str, result: bool, **context: Any) -> bool:
        if self._config.log_decisions:
            self._logger.debug("lineage_decision", query=query, result=result, **context)
        return result

    # ─── Ancestry ───────────────────────────────────────────────────

    def has_ancestor(self, signing: SigningIdentity, other: SigningIdentity) -> bool:
        return self._decision(
            "has_ancestor",
            ancestry.has_ancestor(signing, other),
            signing=_describe(signing),
            other=_describe(other),
        )

    def has_common_ancestor(self, signing: SigningIdentity, other: SigningIdentity) -> bool:
        return self._decision(
            "has_common_ancestor",
            ancestry.has_common_ancestor(signing, other),
            signing=_describe(signing),
            other=_describe(other),
        )

    def signatures_match_exactly(self, signing: SigningIdentity, other: SigningIdentity) -> bool:
        return self._decision(
            "signatures_match_exactly",
            ancestry.signatures_match_exactly(signing, other),
            signing=_describe(signing),
            other=_describe(other),
        )

    # ─── Capabilities ───────────────────────────────────────────────

    def has_common_signer_with_capability(
        self,
        signing: SigningIdentity,
        other: SigningIdentity,
        requested: Capability,
    ) -> bool:
        return self._decision(
            "has_common_signer_with_capability",
            capability.has_common_signer_with_capability(signing, other, requested),
            requested=int(requested),
            signing=_describe(signing),
            other=_describe(other),
        )

    def check_capability(
        self,
        signing: SigningIdentity,
        old: SigningIdentity,
        requested: Capability,
    ) -> bool:
        return self._decision(
            "check_capability",
            capability.check_capability(signing, old, requested),
            requested=int(requested),
            signing=_describe(signing),
            other=_describe(old),
        )

    def has_certificate(
        self,
        signing: SigningIdentity,
        identity: Identity,
        requested: Capability | None = None,
    ) -> bool:
        return self._decision(
            "has_certificate",
            capability.has_certificate(signing, identity, requested),
            identity=identity.short,
            requested=None if requested is None else int(requested),
            signing=_describe(signing),
        )

    # ─── Merge ──────────────────────────────────────────────────────

    def merge_lineage_with(
        self,
        signing: SigningIdentity,
        other: SigningIdentity,
    ) -> SigningIdentity:
        if signing.has_lineage and other.has_lineage:
            alignment = align(signing.lineage, other.lineage)
            if alignment is None:
                self._logger.info(
                    "lineage_merge_irreconcilable",
                    signing=_describe(signing),
                    other=_describe(other),
                )
                return signing
            merged = merge.merge_aligned(signing, other, alignment)
        else:
            merged = merge.merge_lineage_with(signing, other)

        if self._config.log_decisions:
            self._logger.debug(
                "lineage_merged",
                outcome="self" if merged is signing else "other" if merged is other else "new",
                lineage_length=len(merged.lineage),
            )
        return merged

    # ─── Digests ────────────────────────────────────────────────────

    def has_ancestor_or_self_with_digest(
        self,
        signing: SigningIdentity,
        digests: Collection[str] | None,
    ) -> bool:
        return self._decision(
            "has_ancestor_or_self_with_digest",
            digest.has_ancestor_or_self_with_digest(
                signing, digests, self._config.digest_algorithm,
            ),
            digest_count=None if digests is None else len(digests),
            signing=_describe(signing),
        )

    def compute_digest_set(self, identities: list[Identity]) -> frozenset[str]:
        return digest.compute_digest_set(identities, self._config.digest_algorithm)

    # ─── Health ─────────────────────────────────────────────────────

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "digest_algorithm": self._config.digest_algorithm,
            "max_lineage_length": self._config.max_lineage_length,
            "log_decisions": self._config.log_decisions,
        }
