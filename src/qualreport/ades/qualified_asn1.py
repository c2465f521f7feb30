from asn1crypto import core, x509

from qualreport.ades.asn1_util import register_x509_extension

__all__ = [
    'QcStatement',
    'QcStatementId',
    'QcStatements',
    'get_qc_statements',
    'get_qc_statement_ids',
]


class QcStatementId(core.ObjectIdentifier):
    _map = {
        # ETSI EN 319 412-5
        '0.4.0.1862.1.1': 'qc_compliance',
        '0.4.0.1862.1.2': 'qc_limit_value',
        '0.4.0.1862.1.3': 'qc_retention_period',
        '0.4.0.1862.1.4': 'qc_sscd',
        '0.4.0.1862.1.5': 'qc_pki_disclosure_statements',
        '0.4.0.1862.1.6': 'qc_type',
        '0.4.0.1862.1.7': 'qc_cc_legislation',
    }


class QcStatement(core.Sequence):
    # statement_info is kept opaque, the qualification logic only
    # looks at statement identifiers
    _fields = [
        ('statement_id', QcStatementId),
        ('statement_info', core.Any, {'optional': True}),
    ]


class QcStatements(core.SequenceOf):
    _child_spec = QcStatement


def get_qc_statements(cert: x509.Certificate) -> QcStatements:
    extensions = cert['tbs_certificate']['extensions']
    if isinstance(extensions, core.Void):
        return QcStatements()
    for ext in extensions:
        if ext['extn_id'].native != 'qc_statements':
            continue
        qc_statements: QcStatements = ext['extn_value'].parsed
        return qc_statements
    else:
        return QcStatements()


def get_qc_statement_ids(cert: x509.Certificate) -> frozenset:
    """
    Return the (readable) identifiers of all QcStatements
    present on a certificate.
    """
    return frozenset(
        statement['statement_id'].native
        for statement in get_qc_statements(cert)
    )


register_x509_extension('1.3.6.1.5.5.7.1.3', 'qc_statements', QcStatements)
