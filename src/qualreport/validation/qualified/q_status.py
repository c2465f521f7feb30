import enum
from dataclasses import dataclass
from typing import FrozenSet

from asn1crypto import x509

from qualreport.ades.qualified_asn1 import get_qc_statement_ids

__all__ = [
    'CertificateAttributes',
    'QualificationLevel',
    'QCP_POLICIES',
    'QCP_PLUS_POLICIES',
]


QCP_POLICIES: FrozenSet[str] = frozenset(
    [
        # QCP public (ETSI TS 101 456)
        '0.4.0.1456.1.2',
        # QCP-n, QCP-l (ETSI EN 319 411-2)
        '0.4.0.194112.1.0',
        '0.4.0.194112.1.1',
    ]
)
"""
Certificate policies under which qualified certificates are issued.
"""

QCP_PLUS_POLICIES: FrozenSet[str] = frozenset(
    [
        # QCP public + SSCD (ETSI TS 101 456)
        '0.4.0.1456.1.1',
        # QCP-n-qscd, QCP-l-qscd (ETSI EN 319 411-2)
        '0.4.0.194112.1.2',
        '0.4.0.194112.1.3',
    ]
)
"""
Certificate policies under which qualified certificates are issued
with the private key residing in an SSCD/QSCD.
"""


class QualificationLevel(enum.Enum):
    """
    Qualification level of a signature, in the sense of the eIDAS regulation.
    """

    QUALIFIED_ESIGNATURE = 'QESig'
    """
    Qualified electronic signature.
    """

    QUALIFIED_ESEAL = 'QESeal'
    """
    Qualified electronic seal.
    """

    ADVANCED_ESIGNATURE_QC = 'AdESig-QC'
    """
    Advanced electronic signature supported by a qualified certificate.
    """

    ADVANCED_ESEAL_QC = 'AdESeal-QC'
    """
    Advanced electronic seal supported by a qualified certificate.
    """

    ADVANCED_ESIGNATURE = 'AdESig'
    """
    Advanced electronic signature.
    """

    ADVANCED_ESEAL = 'AdESeal'
    """
    Advanced electronic seal.
    """

    NOT_APPLICABLE = 'N/A'
    """
    The qualification level could not be determined.
    """


@dataclass(frozen=True)
class CertificateAttributes:
    """
    Qualification-related claims made by a certificate about itself.
    """

    is_qcp: bool = False
    """
    Issued under a QCP certificate policy.
    """

    is_qcp_plus: bool = False
    """
    Issued under a QCP+ certificate policy (i.e. with an SSCD/QSCD).
    """

    is_qcc: bool = False
    """
    Carries the ``QcCompliance`` statement.
    """

    is_qcsscd: bool = False
    """
    Carries the ``QcSSCD`` statement.
    """

    @property
    def claims_qualified(self) -> bool:
        return self.is_qcc or self.is_qcp or self.is_qcp_plus

    @property
    def claims_sscd(self) -> bool:
        return self.is_qcsscd or self.is_qcp_plus

    @classmethod
    def from_certificate(
        cls, cert: x509.Certificate
    ) -> 'CertificateAttributes':
        """
        Derive the attributes from a certificate's policies and
        QcStatements.

        :param cert:
            The certificate to inspect.
        :return:
            A :class:`CertificateAttributes` object.
        """
        policy_ext = cert.certificate_policies_value or ()
        policy_oids = {pol['policy_identifier'].dotted for pol in policy_ext}
        statements = get_qc_statement_ids(cert)
        return cls(
            is_qcp=not policy_oids.isdisjoint(QCP_POLICIES),
            is_qcp_plus=not policy_oids.isdisjoint(QCP_PLUS_POLICIES),
            is_qcc='qc_compliance' in statements,
            is_qcsscd='qc_sscd' in statements,
        )
