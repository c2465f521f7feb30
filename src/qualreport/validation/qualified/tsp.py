"""
Trust service information relevant for the qualification of certificates.

Trusted lists have been published according to two versions of the
ETSI schema over the years: ETSI TS 102 231 (under Directive 1999/93/EC)
and ETSI TS 119 612. The service information extension URIs differ between
the two, so each qualifier is known here under every spelling that it was
ever published with.
"""

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Union

__all__ = [
    'CA_QC_URI',
    'NO_ASSERTIONS',
    'Qualifier',
    'QualifierSet',
    'TrustServiceAssertions',
    'has_qualifier',
    'canonical_qualifier',
]

# noinspection HttpUrlsUsage
_TRSTSVC_URI_BASE = 'http://uri.etsi.org/TrstSvc'
CA_QC_URI = f'{_TRSTSVC_URI_BASE}/Svctype/CA/QC'
_TRUSTEDLIST_URI_BASE = f'{_TRSTSVC_URI_BASE}/TrustedList'
_SVCINFOEXT_URI_BASE = f'{_TRUSTEDLIST_URI_BASE}/SvcInfoExt'
_LEGACY_SVCINFOEXT_URI_BASE = (
    f'{_TRSTSVC_URI_BASE}/eSigDir-1999-93-EC-TrustedList/SvcInfoExt'
)


class Qualifier(enum.Enum):
    """
    Qualifier as specified in ETSI TS 119 612, 5.5.9.2.
    """

    WITH_SSCD = 'QCWithSSCD'
    NO_SSCD = 'QCNoSSCD'
    SSCD_AS_IN_CERT = 'QCSSCDStatusAsInCert'
    WITH_QSCD = 'QCWithQSCD'
    NO_QSCD = 'QCNoQSCD'
    QSCD_AS_IN_CERT = 'QCQSCDStatusAsInCert'
    QSCD_MANAGED_ON_BEHALF = 'QCQSCDManagedOnBehalf'
    LEGAL_PERSON = 'QCForLegalPerson'
    FOR_ESIG = 'QCForESig'
    FOR_ESEAL = 'QCForESeal'
    FOR_WSA = 'QCForWSA'
    NOT_QUALIFIED = 'NotQualified'
    QC_STATEMENT = 'QCStatement'

    @property
    def uri(self) -> str:
        """
        The URI of the qualifier according to ETSI TS 119 612.
        """
        return f"{_SVCINFOEXT_URI_BASE}/{self.value}"

    @property
    def legacy_uri(self) -> Optional[str]:
        """
        The URI of the qualifier according to ETSI TS 102 231, if the
        qualifier already existed under the previous trusted list schema.
        """
        if self in _LEGACY_QUALIFIERS:
            return f"{_LEGACY_SVCINFOEXT_URI_BASE}/{self.value}"
        return None

    @property
    def spellings(self) -> FrozenSet[str]:
        """
        All textual representations under which this qualifier is recognised.
        """
        return _QUALIFIER_ALIASES[self]


_LEGACY_QUALIFIERS = frozenset(
    [
        Qualifier.WITH_SSCD,
        Qualifier.NO_SSCD,
        Qualifier.SSCD_AS_IN_CERT,
        Qualifier.LEGAL_PERSON,
        Qualifier.QC_STATEMENT,
    ]
)


def _build_alias_table() -> Dict[Qualifier, FrozenSet[str]]:
    table = {}
    for q in Qualifier:
        spellings = {q.value, q.uri}
        legacy_uri = q.legacy_uri
        if legacy_uri is not None:
            spellings.add(legacy_uri)
        table[q] = frozenset(spellings)
    return table


_QUALIFIER_ALIASES = _build_alias_table()
_QUALIFIER_BY_SPELLING = {
    spelling: q
    for q, spellings in _QUALIFIER_ALIASES.items()
    for spelling in spellings
}


def canonical_qualifier(spelling: str) -> Optional[Qualifier]:
    """
    Map any known spelling of a qualifier to its canonical value.

    :param spelling:
        A qualifier URI (current or legacy) or short name.
    :return:
        The corresponding :class:`Qualifier`, or ``None`` if the
        spelling is not recognised.
    """
    return _QUALIFIER_BY_SPELLING.get(spelling.strip())


def has_qualifier(
    qualifiers: Iterable[str], qualifier: Union[Qualifier, str]
) -> bool:
    """
    Check whether a qualifier is present among a collection of qualifier
    strings, regardless of the spelling used on either side.

    :param qualifiers:
        Qualifier strings, as published in the trusted list.
    :param qualifier:
        The qualifier to look for, either as a :class:`Qualifier` or
        as any of its spellings. Unrecognised strings only match themselves.
    :return:
        ``True`` if the qualifier is present.
    """
    return QualifierSet.from_strings(qualifiers).has_qualifier(qualifier)


@dataclass(frozen=True)
class QualifierSet:
    """
    Qualifiers asserted by the trust service entry covering a certificate.
    """

    raw_qualifiers: FrozenSet[str]
    """
    The qualifier strings as they appear in the trusted list.
    """

    @classmethod
    def from_strings(cls, qualifiers: Iterable[str]) -> 'QualifierSet':
        return cls(frozenset(q.strip() for q in qualifiers))

    @property
    def qualifiers(self) -> FrozenSet[Qualifier]:
        """
        The canonical qualifiers in this set. Unknown strings are left out.
        """
        found = (canonical_qualifier(s) for s in self.raw_qualifiers)
        return frozenset(q for q in found if q is not None)

    def has_qualifier(self, qualifier: Union[Qualifier, str]) -> bool:
        if isinstance(qualifier, str):
            canonical = canonical_qualifier(qualifier)
            if canonical is None:
                return qualifier in self.raw_qualifiers
            qualifier = canonical
        return not self.raw_qualifiers.isdisjoint(qualifier.spellings)

    def has_any(self, *qualifiers: Qualifier) -> bool:
        return any(self.has_qualifier(q) for q in qualifiers)

    def __contains__(self, item) -> bool:
        return self.has_qualifier(item)

    def __iter__(self):
        return iter(self.raw_qualifiers)

    def __len__(self):
        return len(self.raw_qualifiers)


@dataclass(frozen=True)
class TrustServiceAssertions:
    """
    Assertions made by the trusted list about the trust service that issued
    a certificate.
    """

    is_ca_qc: bool = False
    """
    The service is a CA issuing qualified certificates
    (service type ``CA/QC``).
    """

    qc_no_sscd: bool = False
    """
    The private key is declared not to reside in an SSCD/QSCD.
    """

    qc_for_legal_person: bool = False
    """
    Certificates are issued to legal persons.
    """

    qc_sscd_as_in_cert: bool = False
    """
    The SSCD/QSCD status is to be taken from the certificate.
    """

    qc_with_sscd: bool = False
    """
    The private key is declared to reside in an SSCD/QSCD.
    """

    @classmethod
    def from_service(
        cls,
        service_type: Optional[str],
        qualifiers: Union[QualifierSet, Iterable[str]] = (),
    ) -> 'TrustServiceAssertions':
        """
        Derive the assertions from a trusted list service entry.

        :param service_type:
            The service type identifier URI.
        :param qualifiers:
            The qualifiers published for the service, in any spelling.
        :return:
            A :class:`TrustServiceAssertions` object.
        """
        if not isinstance(qualifiers, QualifierSet):
            qualifiers = QualifierSet.from_strings(qualifiers)
        return cls(
            is_ca_qc=service_type is not None
            and service_type.strip() == CA_QC_URI,
            qc_no_sscd=qualifiers.has_any(Qualifier.NO_SSCD, Qualifier.NO_QSCD),
            qc_for_legal_person=qualifiers.has_qualifier(
                Qualifier.LEGAL_PERSON
            ),
            qc_sscd_as_in_cert=qualifiers.has_any(
                Qualifier.SSCD_AS_IN_CERT, Qualifier.QSCD_AS_IN_CERT
            ),
            qc_with_sscd=qualifiers.has_any(
                Qualifier.WITH_SSCD,
                Qualifier.WITH_QSCD,
                Qualifier.QSCD_MANAGED_ON_BEHALF,
            ),
        )


NO_ASSERTIONS = TrustServiceAssertions()
