from __future__ import annotations

import ipaddress
import logging
import os
import ssl
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

LOG = logging.getLogger(__name__)

COMMON_NAME = "localhost"
VALIDITY = timedelta(days=365)


class Credential(NamedTuple):
    certificate: x509.Certificate
    private_key: ec.EllipticCurvePrivateKey
    cert_pem: bytes
    key_pem: bytes


def generate_self_signed_credential(serial_number: Optional[int] = None, now: Optional[datetime] = None) -> Credential:
    """
    Generate a fresh P-256 key and a self-signed certificate for "localhost".

    The certificate is valid for exactly one year from ``now`` and carries a
    random serial unless one is given. Nothing touches the filesystem.
    """
    key = ec.generate_private_key(ec.SECP256R1())
    # certificates store whole seconds
    not_before = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, COMMON_NAME)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial_number if serial_number is not None else x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + VALIDITY)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=False,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(COMMON_NAME), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )
    LOG.debug("Generated self-signed certificate serial=%x valid until %s", cert.serial_number, not_before + VALIDITY)
    return Credential(
        certificate=cert,
        private_key=key,
        cert_pem=cert.public_bytes(serialization.Encoding.PEM),
        key_pem=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )


def _pem_pipe(pem: bytes) -> int:
    read_fd, write_fd = os.pipe()
    try:
        os.write(write_fd, pem)
    except BaseException:
        os.close(read_fd)
        raise
    finally:
        os.close(write_fd)
    return read_fd


def _load_cert_chain(ctx: ssl.SSLContext, cert_pem: bytes, key_pem: bytes) -> None:
    # load_cert_chain only accepts paths and reads each one once; feed it pipes
    cert_fd = _pem_pipe(cert_pem)
    try:
        key_fd = _pem_pipe(key_pem)
        try:
            ctx.load_cert_chain(certfile="/dev/fd/%d" % cert_fd, keyfile="/dev/fd/%d" % key_fd)
        finally:
            os.close(key_fd)
    finally:
        os.close(cert_fd)


def build_ssl_context(credential: Credential) -> ssl.SSLContext:
    """Server-side SSL context presenting ``credential``, TLS 1.2 or newer."""
    ctx = ssl.create_default_context(purpose=ssl.Purpose.CLIENT_AUTH)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    _load_cert_chain(ctx, credential.cert_pem, credential.key_pem)
    return ctx
