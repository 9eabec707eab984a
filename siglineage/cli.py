"""
SigLineage — Command Line

Answers lineage questions about identities described in a YAML/JSON
document (see siglineage.systems.lineage.loader for the format).

Usage:
    siglineage --identities packages.yaml ancestor new-app old-app
    siglineage --identities packages.yaml common-ancestor app-a app-b
    siglineage --identities packages.yaml capability app-a app-b --capability PERMISSION
    siglineage --identities packages.yaml merge app-a app-b
    siglineage --identities packages.yaml digest app-a --digest 3f1c...

Boolean answers print ``true``/``false`` and exit 0/1. Invalid input exits 2.
"""

from __future__ import annotations

import argparse
import json
import sys

from pydantic import ValidationError

from siglineage.config import load_config
from siglineage.primitives.signing import LineageError, parse_capabilities
from siglineage.systems.lineage.loader import dump_signing_identity, load_signing_identities
from siglineage.systems.lineage.service import LineageEngine
from siglineage.telemetry.logging import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="siglineage",
        description="Signing-lineage trust queries",
    )
    parser.add_argument("--identities", required=True, help="YAML or JSON identity document")
    parser.add_argument("--config", default=None, help="YAML configuration file")

    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("ancestor", "Is OTHER a strict ancestor of SUBJECT?"),
        ("common-ancestor", "Could SUBJECT and OTHER share one rotation timeline?"),
        ("merge", "Print the merged signing identity as JSON"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("subject")
        command.add_argument("other")

    capability = commands.add_parser(
        "capability", help="Does OTHER share a signer SUBJECT still grants the capabilities?",
    )
    capability.add_argument("subject")
    capability.add_argument("other")
    capability.add_argument(
        "--capability", action="append", required=True,
        help="Capability name, repeatable (e.g. PERMISSION)",
    )

    digest = commands.add_parser("digest", help="Is SUBJECT, or an ancestor, in the digest set?")
    digest.add_argument("subject")
    digest.add_argument("--digest", action="append", required=True, help="Hex digest, repeatable")

    return parser


def _answer(result: bool) -> int:
    print("true" if result else "false")
    return 0 if result else 1


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        setup_logging(config.logging)
        engine = LineageEngine(config.lineage)
        identities = load_signing_identities(args.identities, config.lineage)

        subject = identities[args.subject]
        if args.command == "digest":
            return _answer(engine.has_ancestor_or_self_with_digest(
                subject, {d.strip().lower() for d in args.digest},
            ))

        other = identities[args.other]
        if args.command == "ancestor":
            return _answer(engine.has_ancestor(subject, other))
        if args.command == "common-ancestor":
            return _answer(engine.has_common_ancestor(subject, other))
        if args.command == "capability":
            requested = parse_capabilities(args.capability)
            return _answer(engine.has_common_signer_with_capability(subject, other, requested))

        merged = engine.merge_lineage_with(subject, other)
        print(json.dumps(dump_signing_identity(merged), indent=2))
        return 0

    except KeyError as exc:
        print(f"error: unknown identity {exc}", file=sys.stderr)
        return 2
    except (LineageError, ValidationError, ValueError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
