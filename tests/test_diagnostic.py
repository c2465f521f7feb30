import pytest

from qualreport.ades.report import (
    Indication,
    IndeterminateSubIndication,
    InvalidSubIndication,
    sub_indication_by_name,
)
from qualreport.general import escape_for_xml
from qualreport.validation.diagnostic import (
    UNKNOWN_SIGNER,
    CertificateInfo,
    DiagnosticData,
    SignatureRecord,
    SignatureType,
    SimpleDiagnosticData,
)
from qualreport.validation.errors import MissingInputError, ReportBuildError
from qualreport.validation.qualified.q_status import CertificateAttributes
from qualreport.validation.qualified.tsp import CA_QC_URI, Qualifier


@pytest.mark.parametrize(
    'text,expected',
    [
        ('plain', 'plain'),
        ('a < b & c > d', 'a &lt; b &amp; c &gt; d'),
        ('"quoted" \'single\'', '&quot;quoted&quot; &apos;single&apos;'),
        ('bell\x07 and\x00 nul', 'bell and nul'),
        ('tab\tnewline\n', 'tab\tnewline\n'),
        ('\ufffe', ''),
    ],
)
def test_escape_for_xml(text, expected):
    assert escape_for_xml(text) == expected


def test_sub_indication_by_name():
    assert (
        sub_indication_by_name(Indication.INVALID, 'EXPIRED')
        == InvalidSubIndication.EXPIRED
    )
    assert (
        sub_indication_by_name(Indication.INDETERMINATE, 'EXPIRED')
        == IndeterminateSubIndication.EXPIRED
    )
    assert sub_indication_by_name(Indication.VALID, None) is None
    assert sub_indication_by_name(Indication.INVALID, '') is None
    with pytest.raises(ValueError):
        sub_indication_by_name(Indication.VALID, 'EXPIRED')


def test_missing_input_error_hierarchy():
    err = MissingInputError('No document name')
    assert isinstance(err, ReportBuildError)
    assert err.failure_message == 'No document name'
    assert not err.already_reported


def test_counter_signature_requires_parent():
    with pytest.raises(ValueError, match='must have a parent'):
        SignatureRecord('S2', signature_type=SignatureType.COUNTER_SIGNATURE)
    record = SignatureRecord(
        'S2', signature_type=SignatureType.COUNTER_SIGNATURE, parent_id='S1'
    )
    assert record.is_counter_signature


def test_certificate_info_from_certificate(make_cert):
    cert = make_cert(
        common_name='Alice',
        policies=['0.4.0.194112.1.2'],
        qc_statements=['qc_compliance'],
    )
    info = CertificateInfo.from_certificate(
        'C1',
        cert,
        service_type=CA_QC_URI,
        qualifiers=[Qualifier.LEGAL_PERSON.legacy_uri],
    )
    assert info.display_name == 'Alice'
    assert info.attributes == CertificateAttributes(
        is_qcp_plus=True, is_qcc=True
    )
    assertions = info.trust_service_assertions
    assert assertions.is_ca_qc
    assert assertions.qc_for_legal_person


def test_certificate_info_without_trust_info():
    info = CertificateInfo('C1')
    assert info.trust_service_assertions is None
    assert info.attributes == CertificateAttributes()


def test_simple_diagnostic_data_lookup(caplog):
    data = SimpleDiagnosticData(
        'doc.pdf',
        [SignatureRecord('S1'), SignatureRecord('S2')],
        [CertificateInfo('C1', display_name='Alice'), CertificateInfo('C2')],
    )
    assert data.document_name() == 'doc.pdf'
    assert [s.signature_id for s in data.list_signatures()] == ['S1', 'S2']
    assert data.display_name('C1') == 'Alice'
    assert data.display_name('C2') == UNKNOWN_SIGNER
    assert data.display_name('C3') == UNKNOWN_SIGNER
    assert data.certificate_attributes('C3') is None
    assert data.trust_service_assertions('C3') is None
    assert 'C3' in caplog.text


def test_simple_diagnostic_data_signatures_copied():
    data = SimpleDiagnosticData('doc.pdf', [SignatureRecord('S1')])
    data.list_signatures().append(SignatureRecord('S2'))
    assert len(data.list_signatures()) == 1


def test_missing_document_name():
    data = SimpleDiagnosticData(None, [])
    with pytest.raises(MissingInputError):
        data.document_name()


def test_diagnostic_data_interface():
    data = DiagnosticData()
    with pytest.raises(NotImplementedError):
        data.list_signatures()
    with pytest.raises(NotImplementedError):
        data.display_name('C1')


def test_display_name_multiple_common_names(make_cert):
    cert = make_cert(common_name=['Alice', 'Bob'])
    info = CertificateInfo.from_certificate('C1', cert)
    assert info.display_name == 'Alice, Bob'


def test_unknown_certificate_logged_once(caplog):
    data = SimpleDiagnosticData('doc.pdf', [SignatureRecord('S1')])
    assert data.display_name('C9') == UNKNOWN_SIGNER
    assert data.certificate_attributes('C9') is None
    assert data.trust_service_assertions('C9') is None
    warnings = [r for r in caplog.records if 'C9' in r.getMessage()]
    assert len(warnings) == 1
