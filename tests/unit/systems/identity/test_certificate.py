"""
Unit tests for the X.509 certificate adapter.
"""

from __future__ import annotations

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from siglineage.primitives.signing import Capability, Identity, SigningIdentity
from siglineage.systems.identity.certificate import (
    certificate_fingerprint,
    has_public_key,
    identity_from_der,
    identity_from_pem,
    public_key_bytes,
)


def make_certificate(common_name: str) -> tuple[ec.EllipticCurvePrivateKey, x509.Certificate]:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(key, hashes.SHA256())
    )
    return key, cert


@pytest.fixture(scope="module")
def certificates() -> list[tuple[ec.EllipticCurvePrivateKey, x509.Certificate]]:
    return [make_certificate(f"signer-{i}") for i in range(3)]


# ─── Identities ─────────────────────────────────────────────────


class TestCertificateIdentity:
    def test_pem_and_der_agree(self, certificates):
        _, cert = certificates[0]
        pem = cert.public_bytes(serialization.Encoding.PEM)
        der = cert.public_bytes(serialization.Encoding.DER)
        assert identity_from_pem(pem) == identity_from_der(der)
        assert identity_from_pem(pem.decode("ascii")).encoded == der

    def test_fingerprint_matches_digest(self, certificates):
        _, cert = certificates[0]
        identity = identity_from_der(cert.public_bytes(serialization.Encoding.DER))
        assert certificate_fingerprint(identity) == identity.digest()

    def test_distinct_certificates_distinct_identities(self, certificates):
        identities = {
            identity_from_der(cert.public_bytes(serialization.Encoding.DER))
            for _, cert in certificates
        }
        assert len(identities) == 3

    def test_garbage_der_rejected(self):
        with pytest.raises(ValueError):
            identity_from_der(b"\x30\x03\x02\x01\x00")


# ─── Public Key Lookup ──────────────────────────────────────────


class TestHasPublicKey:
    def _rotated(self, certificates, capabilities):
        identities = [
            identity_from_der(cert.public_bytes(serialization.Encoding.DER))
            for _, cert in certificates
        ]
        return SigningIdentity.from_lineage(zip(identities, capabilities))

    def test_current_signer_key(self, certificates):
        signing = self._rotated(certificates, [Capability.NONE] * 3)
        key, _ = certificates[2]
        assert has_public_key(signing, key.public_key(), Capability.ALL)

    def test_past_signer_key_any_capability(self, certificates):
        signing = self._rotated(certificates, [Capability.AUTH, Capability.NONE, Capability.ALL])
        key, _ = certificates[0]
        assert has_public_key(signing, key.public_key())
        assert has_public_key(signing, key.public_key(), Capability.AUTH)
        assert not has_public_key(signing, key.public_key(), Capability.PERMISSION)

    def test_unrelated_key(self, certificates):
        signing = self._rotated(certificates[:2], [Capability.ALL] * 2)
        key, _ = certificates[2]
        assert not has_public_key(signing, key.public_key())

    def test_cosigned(self, certificates):
        identities = [
            identity_from_der(cert.public_bytes(serialization.Encoding.DER))
            for _, cert in certificates[:2]
        ]
        cosigned = SigningIdentity.of(*identities)
        assert has_public_key(cosigned, certificates[1][0].public_key())
        assert not has_public_key(cosigned, certificates[2][0].public_key())

    def test_non_certificate_identities_never_match(self, certificates):
        key, cert = certificates[0]
        signing = SigningIdentity.from_lineage([
            ("0f01", Capability.ALL),
            (identity_from_der(cert.public_bytes(serialization.Encoding.DER)), Capability.ALL),
        ])
        assert has_public_key(signing, key.public_key())
        assert not has_public_key(SigningIdentity.of(Identity.from_hex("0f01")), key.public_key())

    def test_public_key_bytes_is_spki(self, certificates):
        key, cert = certificates[0]
        assert public_key_bytes(key.public_key()) == public_key_bytes(cert.public_key())
