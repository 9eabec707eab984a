"""
SigLineage — Certificate Adapter

Bridges X.509 certificate material and the opaque Identity the lineage
engine reasons about. The engine never parses certificates itself; callers
that hold PEM or DER certificates build identities here, and callers that
only know a public key can look it up across a signing history.

Certificates are assumed to have been authenticated already. Nothing here
verifies signatures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509 import load_der_x509_certificate, load_pem_x509_certificate

from siglineage.primitives.signing import Capability, Identity, SigningIdentity, grants_all

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

logger = structlog.get_logger("siglineage.systems.identity.certificate")


def identity_from_pem(cert_pem: bytes | str) -> Identity:
    """Identity of a PEM-encoded X.509 certificate (its DER bytes)."""
    if isinstance(cert_pem, str):
        cert_pem = cert_pem.encode("ascii")
    cert = load_pem_x509_certificate(cert_pem)
    return Identity(encoded=cert.public_bytes(serialization.Encoding.DER))


def identity_from_der(cert_der: bytes) -> Identity:
    """Identity of a DER-encoded X.509 certificate. Rejects undecodable input."""
    cert = load_der_x509_certificate(cert_der)
    return Identity(encoded=cert.public_bytes(serialization.Encoding.DER))


def certificate_fingerprint(identity: Identity) -> str:
    """SHA-256 fingerprint of the certificate; equal to ``identity.digest()``."""
    cert = load_der_x509_certificate(identity.encoded)
    return cert.fingerprint(hashes.SHA256()).hex()


def public_key_bytes(public_key: PublicKeyTypes) -> bytes:
    """DER SubjectPublicKeyInfo, the comparable form of a public key."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _identity_key_bytes(identity: Identity) -> bytes | None:
    try:
        cert = load_der_x509_certificate(identity.encoded)
        return public_key_bytes(cert.public_key())
    except ValueError:
        logger.debug("identity_not_a_certificate", identity=identity.short)
        return None


def has_public_key(
    signing: SigningIdentity,
    public_key: PublicKeyTypes,
    capabilities: Capability | None = None,
) -> bool:
    """
    True if ``public_key`` belongs to a current signer of ``signing``, or to
    an older certificate in its lineage granted all of ``capabilities``.

    Identities whose bytes are not X.509 certificates never match.
    """
    if signing.is_unknown:
        return False
    wanted = public_key_bytes(public_key)

    if any(_identity_key_bytes(identity) == wanted for identity in signing.current):
        return True
    if signing.is_cosigned:
        return False

    return any(
        (capabilities is None or grants_all(entry.capabilities, capabilities))
        and _identity_key_bytes(entry.identity) == wanted
        for entry in signing.lineage[:-1]
    )
