from datetime import datetime, timezone

import pytest
from asn1crypto import x509
from cryptography import x509 as crypto_x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID, ObjectIdentifier

from qualreport.ades.qualified_asn1 import QcStatement, QcStatements

QC_STATEMENTS_OID = '1.3.6.1.5.5.7.1.3'


def _build_cert(
    common_name=None,
    organization='Example Trust Services',
    policies=(),
    qc_statements=(),
) -> crypto_x509.Certificate:
    key = ec.generate_private_key(ec.SECP256R1())
    name_attrs = [
        crypto_x509.NameAttribute(NameOID.COUNTRY_NAME, 'BE'),
        crypto_x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization),
    ]
    if isinstance(common_name, str):
        common_name = [common_name]
    for cn in common_name or ():
        name_attrs.append(crypto_x509.NameAttribute(NameOID.COMMON_NAME, cn))
    name = crypto_x509.Name(name_attrs)
    builder = (
        crypto_x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(crypto_x509.random_serial_number())
        .not_valid_before(datetime(2020, 1, 1, tzinfo=timezone.utc))
        .not_valid_after(datetime(2030, 1, 1, tzinfo=timezone.utc))
        .add_extension(
            crypto_x509.BasicConstraints(ca=False, path_length=None),
            critical=True,
        )
    )
    if policies:
        builder = builder.add_extension(
            crypto_x509.CertificatePolicies(
                [
                    crypto_x509.PolicyInformation(ObjectIdentifier(oid), None)
                    for oid in policies
                ]
            ),
            critical=False,
        )
    if qc_statements:
        statements = QcStatements(
            [QcStatement({'statement_id': stmt}) for stmt in qc_statements]
        )
        builder = builder.add_extension(
            crypto_x509.UnrecognizedExtension(
                ObjectIdentifier(QC_STATEMENTS_OID), statements.dump()
            ),
            critical=False,
        )
    return builder.sign(key, hashes.SHA256())


@pytest.fixture
def make_cert():
    """
    Factory for self-signed test certificates carrying qualification
    claims, returned as asn1crypto certificates.
    """

    def _make(**kwargs) -> x509.Certificate:
        cert = _build_cert(**kwargs)
        return x509.Certificate.load(
            cert.public_bytes(serialization.Encoding.DER)
        )

    return _make


@pytest.fixture
def write_cert(tmp_path):
    """
    Factory writing a test certificate to a file in PEM or DER format.
    Returns the file name, relative to ``tmp_path``.
    """

    def _write(file_name, pem=True, **kwargs) -> str:
        cert = _build_cert(**kwargs)
        encoding = (
            serialization.Encoding.PEM if pem else serialization.Encoding.DER
        )
        (tmp_path / file_name).write_bytes(cert.public_bytes(encoding))
        return file_name

    return _write
