import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from qualreport.config.api import ConfigurableMixin, process_bool, process_enum
from qualreport.validation.qualified.q_status import (
    CertificateAttributes,
    QualificationLevel,
)
from qualreport.validation.qualified.tsp import (
    NO_ASSERTIONS,
    Qualifier,
    QualifierSet,
    TrustServiceAssertions,
)

__all__ = [
    'QualificationFacts',
    'QualificationRule',
    'QualificationClassifier',
    'DEFAULT_QUALIFICATION_RULES',
    'derive_facts',
    'is_for_legal_person',
]


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QualificationFacts:
    """
    Effective qualification status of a certificate, after reconciling
    the certificate's own claims with the trusted list.
    """

    qualified: bool
    """
    The certificate is a qualified certificate.
    """

    sscd: bool
    """
    The private key resides in an SSCD/QSCD. Always ``False`` for
    non-qualified certificates.
    """

    legal_person: bool
    """
    The certificate was issued to a legal person.
    """


def derive_facts(
    cert: CertificateAttributes, trust: TrustServiceAssertions
) -> QualificationFacts:
    """
    Combine the certificate's claims with the trusted list's assertions.

    Whenever the two disagree, the trusted list prevails. In particular,
    a certificate can never make itself qualified without its issuer being
    listed as a CA/QC service.
    """
    qualified = trust.is_ca_qc and cert.claims_qualified

    sscd: bool
    if not qualified:
        sscd = False
    elif trust.qc_no_sscd:
        # conservative default if QCWithSSCD is asserted as well
        sscd = False
    elif trust.qc_with_sscd:
        sscd = True
    else:
        # either explicitly deferred to the cert (QCSSCDStatusAsInCert),
        # or the TL is silent on the matter
        sscd = cert.claims_sscd
    return QualificationFacts(
        qualified=qualified, sscd=sscd, legal_person=trust.qc_for_legal_person
    )


@dataclass(frozen=True)
class QualificationRule(ConfigurableMixin):
    """
    Row of the qualification decision table.

    Conditions that are ``None`` are not taken into account when matching.
    """

    level: QualificationLevel
    """
    Level assigned to certificates matching this rule.
    """

    qualified: Optional[bool] = None
    sscd: Optional[bool] = None
    legal_person: Optional[bool] = None

    def matches(self, facts: QualificationFacts) -> bool:
        conditions = (
            (self.qualified, facts.qualified),
            (self.sscd, facts.sscd),
            (self.legal_person, facts.legal_person),
        )
        return all(
            expected is None or expected == actual
            for expected, actual in conditions
        )

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)
        if 'level' in config_dict:
            config_dict['level'] = process_enum(
                QualificationLevel, config_dict['level'], 'level'
            )
        for key in ('qualified', 'sscd', 'legal_person'):
            if key in config_dict:
                config_dict[key] = process_bool(
                    config_dict[key], key.replace('_', '-')
                )


DEFAULT_QUALIFICATION_RULES: Tuple[QualificationRule, ...] = (
    QualificationRule(
        QualificationLevel.QUALIFIED_ESIGNATURE,
        qualified=True,
        sscd=True,
        legal_person=False,
    ),
    QualificationRule(
        QualificationLevel.QUALIFIED_ESEAL,
        qualified=True,
        sscd=True,
        legal_person=True,
    ),
    QualificationRule(
        QualificationLevel.ADVANCED_ESIGNATURE_QC,
        qualified=True,
        sscd=False,
        legal_person=False,
    ),
    QualificationRule(
        QualificationLevel.ADVANCED_ESEAL_QC,
        qualified=True,
        sscd=False,
        legal_person=True,
    ),
    QualificationRule(
        QualificationLevel.ADVANCED_ESIGNATURE,
        qualified=False,
        legal_person=False,
    ),
    QualificationRule(
        QualificationLevel.ADVANCED_ESEAL,
        qualified=False,
        legal_person=True,
    ),
)
"""
Default decision table. The first matching rule wins.
"""


class QualificationClassifier:
    """
    Determines the qualification level of a signature from the attributes
    of its signing certificate and the assertions of the trusted list.

    The classifier is stateless: the outcome only depends on the rule
    table and the arguments.

    :param rules:
        Ordered decision table. Defaults to
        :const:`DEFAULT_QUALIFICATION_RULES`.
    """

    def __init__(self, rules: Iterable[QualificationRule] = ()):
        self._rules = tuple(rules) or DEFAULT_QUALIFICATION_RULES

    @property
    def rules(self) -> Tuple[QualificationRule, ...]:
        return self._rules

    def classify(
        self,
        cert: Optional[CertificateAttributes],
        trust: Optional[TrustServiceAssertions],
    ) -> QualificationLevel:
        """
        Classify a signature.

        :param cert:
            Attributes of the signing certificate, or ``None`` if the
            certificate could not be resolved.
        :param trust:
            Assertions of the trust service covering the certificate's
            issuer, or ``None`` if there are none.
        :return:
            The qualification level. This is
            :attr:`.QualificationLevel.NOT_APPLICABLE` if the certificate
            is unknown or if no rule matches.
        """
        if cert is None:
            return QualificationLevel.NOT_APPLICABLE
        facts = derive_facts(cert, trust or NO_ASSERTIONS)
        for rule in self._rules:
            if rule.matches(facts):
                logger.debug(f"Classified {facts} as {rule.level.name}")
                return rule.level
        logger.debug(f"No qualification rule matches {facts}")
        return QualificationLevel.NOT_APPLICABLE


def is_for_legal_person(qualifiers: Union[QualifierSet, Iterable[str]]) -> bool:
    """
    Check whether the trusted list mandates that certificates covered by
    a service entry were issued to a legal person.

    :param qualifiers:
        The qualifiers of the service entry.
    :return:
        ``True`` if the ``QCForLegalPerson`` qualifier is present,
        in either of its spellings.
    """
    if not isinstance(qualifiers, QualifierSet):
        qualifiers = QualifierSet.from_strings(qualifiers)
    return qualifiers.has_qualifier(Qualifier.LEGAL_PERSON)
