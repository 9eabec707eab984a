"""
SigLineage — Signing Identity Documents

Reads named signing identities from YAML or JSON documents, the form in
which policy files and test fixtures describe packages:

    identities:
      app:
        scheme_version: 3
        lineage:
          - {identity: "ab01...", capabilities: [INSTALLED_DATA, PERMISSION]}
          - {identity: "cd02...", capabilities: 31}
      cosigned:
        current: ["ab01...", "ef03..."]

An entry with a lineage and no ``current`` is signed by its newest lineage
entry. Identities are hex-encoded certificate bytes and must be quoted in
YAML, which otherwise reads an all-digit value such as 1234 as a number.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
import yaml

from siglineage.config import LineageConfig
from siglineage.primitives.signing import LineageError, SchemeVersion, SigningIdentity

logger = structlog.get_logger("siglineage.systems.lineage.loader")


def parse_signing_identity(
    name: str,
    raw: dict[str, Any],
    config: LineageConfig | None = None,
) -> SigningIdentity:
    """Validate one document entry into a SigningIdentity."""
    config = config or LineageConfig()
    if not isinstance(raw, dict):
        raise LineageError(f"Identity '{name}' must be a mapping, got {type(raw).__name__}")

    data = dict(raw)
    lineage = data.get("lineage") or []
    if not isinstance(lineage, (list, tuple)):
        raise LineageError(f"Identity '{name}': lineage must be a list")
    current = data.get("current")
    if current is not None and not isinstance(current, (list, tuple, set, frozenset)):
        raise LineageError(f"Identity '{name}': current must be a list")
    if len(lineage) > config.max_lineage_length:
        raise LineageError(
            f"Identity '{name}' has a lineage of {len(lineage)} entries, "
            f"limit is {config.max_lineage_length}"
        )
    if lineage and not current:
        last = lineage[-1]
        if isinstance(last, dict):
            last = last.get("identity")
        elif isinstance(last, (list, tuple)) and last:
            last = last[0]
        data["current"] = [last]
    data.setdefault("scheme_version", SchemeVersion.SIGNING_BLOCK_V3)

    return SigningIdentity.model_validate(data)


def parse_document(
    document: dict[str, Any],
    config: LineageConfig | None = None,
) -> dict[str, SigningIdentity]:
    """Validate every entry of an ``identities`` document."""
    entries = (document or {}).get("identities")
    if not isinstance(entries, dict):
        raise LineageError("Document must contain an 'identities' mapping")
    return {
        str(name): parse_signing_identity(str(name), raw, config)
        for name, raw in entries.items()
    }


def load_signing_identities(
    path: str | Path,
    config: LineageConfig | None = None,
) -> dict[str, SigningIdentity]:
    """Load a document of named signing identities from a YAML or JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Identity document not found: {path}")

    with open(path) as f:
        if path.suffix.lower() == ".json":
            document = json.load(f)
        else:
            document = yaml.safe_load(f) or {}

    identities = parse_document(document, config)
    logger.info("signing_identities_loaded", path=str(path), count=len(identities))
    return identities


def dump_signing_identity(signing: SigningIdentity) -> dict[str, Any]:
    """Document form of a SigningIdentity, readable by parse_signing_identity."""
    data = signing.model_dump(mode="json")
    data["current"] = sorted(data["current"])
    return data
