import dataclasses

import pytest

from qualreport.ades.qualified_asn1 import (
    get_qc_statement_ids,
    get_qc_statements,
)
from qualreport.validation.qualified.q_status import CertificateAttributes


def test_plain_certificate(make_cert):
    cert = make_cert(common_name='Alice')
    assert len(get_qc_statements(cert)) == 0
    attrs = CertificateAttributes.from_certificate(cert)
    assert attrs == CertificateAttributes()
    assert not attrs.claims_qualified
    assert not attrs.claims_sscd


def test_qc_statements_read(make_cert):
    cert = make_cert(
        common_name='Alice',
        qc_statements=['qc_compliance', 'qc_sscd', 'qc_type'],
    )
    assert get_qc_statement_ids(cert) == {'qc_compliance', 'qc_sscd', 'qc_type'}
    attrs = CertificateAttributes.from_certificate(cert)
    assert dataclasses.astuple(attrs) == (False, False, True, True)
    assert attrs.claims_qualified
    assert attrs.claims_sscd


@pytest.mark.parametrize(
    'policy,expected',
    [
        ('0.4.0.1456.1.2', (True, False, False, False)),
        ('0.4.0.194112.1.0', (True, False, False, False)),
        ('0.4.0.194112.1.1', (True, False, False, False)),
        ('0.4.0.1456.1.1', (False, True, False, False)),
        ('0.4.0.194112.1.2', (False, True, False, False)),
        ('0.4.0.194112.1.3', (False, True, False, False)),
        ('2.5.29.32.0', (False, False, False, False)),
    ],
)
def test_policies_read(make_cert, policy, expected):
    cert = make_cert(common_name='Bob', policies=[policy])
    attrs = CertificateAttributes.from_certificate(cert)
    assert dataclasses.astuple(attrs) == expected


def test_qcp_plus_implies_sscd_claim(make_cert):
    cert = make_cert(common_name='Bob', policies=['0.4.0.194112.1.2'])
    attrs = CertificateAttributes.from_certificate(cert)
    assert attrs.claims_qualified
    assert attrs.claims_sscd
    assert not attrs.is_qcsscd
