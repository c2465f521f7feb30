import dataclasses
import itertools

import pytest

from qualreport.config.errors import ConfigurationError
from qualreport.validation.qualified.assess import (
    DEFAULT_QUALIFICATION_RULES,
    QualificationClassifier,
    QualificationFacts,
    QualificationRule,
    derive_facts,
    is_for_legal_person,
)
from qualreport.validation.qualified.q_status import (
    CertificateAttributes,
    QualificationLevel,
)
from qualreport.validation.qualified.tsp import (
    Qualifier,
    TrustServiceAssertions,
)

QCC_SSCD = CertificateAttributes(is_qcc=True, is_qcsscd=True)
QCC_ONLY = CertificateAttributes(is_qcc=True)
QCP_PLUS = CertificateAttributes(is_qcp_plus=True)
NOTHING = CertificateAttributes()

CA_QC = TrustServiceAssertions(is_ca_qc=True)
CA_QC_LEGAL = TrustServiceAssertions(is_ca_qc=True, qc_for_legal_person=True)
NOT_LISTED = TrustServiceAssertions()


@pytest.mark.parametrize(
    'cert,trust,expected_level',
    [
        (QCC_SSCD, CA_QC, QualificationLevel.QUALIFIED_ESIGNATURE),
        (QCP_PLUS, CA_QC, QualificationLevel.QUALIFIED_ESIGNATURE),
        (QCC_SSCD, CA_QC_LEGAL, QualificationLevel.QUALIFIED_ESEAL),
        (QCC_ONLY, CA_QC, QualificationLevel.ADVANCED_ESIGNATURE_QC),
        (QCC_ONLY, CA_QC_LEGAL, QualificationLevel.ADVANCED_ESEAL_QC),
        (NOTHING, CA_QC, QualificationLevel.ADVANCED_ESIGNATURE),
        (NOTHING, CA_QC_LEGAL, QualificationLevel.ADVANCED_ESEAL),
        # certificates can't promote themselves
        (QCC_SSCD, NOT_LISTED, QualificationLevel.ADVANCED_ESIGNATURE),
        (QCP_PLUS, None, QualificationLevel.ADVANCED_ESIGNATURE),
    ],
)
def test_classify_default_table(cert, trust, expected_level):
    classifier = QualificationClassifier()
    assert classifier.classify(cert, trust) == expected_level


def test_classify_unknown_certificate():
    classifier = QualificationClassifier()
    assert (
        classifier.classify(None, CA_QC) == QualificationLevel.NOT_APPLICABLE
    )


def test_tl_no_sscd_overrides_cert():
    trust = TrustServiceAssertions(is_ca_qc=True, qc_no_sscd=True)
    facts = derive_facts(QCC_SSCD, trust)
    assert facts == QualificationFacts(
        qualified=True, sscd=False, legal_person=False
    )


def test_tl_no_sscd_wins_over_with_sscd():
    trust = TrustServiceAssertions(
        is_ca_qc=True, qc_no_sscd=True, qc_with_sscd=True
    )
    assert not derive_facts(QCC_SSCD, trust).sscd


def test_tl_with_sscd_overrides_cert():
    trust = TrustServiceAssertions(is_ca_qc=True, qc_with_sscd=True)
    assert derive_facts(QCC_ONLY, trust).sscd


@pytest.mark.parametrize('as_in_cert', [True, False])
def test_sscd_status_from_cert(as_in_cert):
    trust = TrustServiceAssertions(
        is_ca_qc=True, qc_sscd_as_in_cert=as_in_cert
    )
    assert derive_facts(QCC_SSCD, trust).sscd
    assert not derive_facts(QCC_ONLY, trust).sscd


def test_sscd_meaningless_when_not_qualified():
    trust = TrustServiceAssertions(qc_with_sscd=True)
    facts = derive_facts(QCC_SSCD, trust)
    assert not facts.qualified
    assert not facts.sscd


def _all_attributes():
    for flags in itertools.product([False, True], repeat=4):
        yield CertificateAttributes(*flags)


def _all_assertions():
    for flags in itertools.product([False, True], repeat=5):
        yield TrustServiceAssertions(*flags)


def test_classify_referentially_transparent():
    classifier = QualificationClassifier()
    for cert, trust in itertools.product(_all_attributes(), _all_assertions()):
        first = classifier.classify(cert, trust)
        second = classifier.classify(
            CertificateAttributes(*dataclasses.astuple(cert)),
            TrustServiceAssertions(*dataclasses.astuple(trust)),
        )
        assert first == second
        assert first != QualificationLevel.NOT_APPLICABLE


def test_qualified_requires_ca_qc():
    classifier = QualificationClassifier()
    qualified_levels = {
        QualificationLevel.QUALIFIED_ESIGNATURE,
        QualificationLevel.QUALIFIED_ESEAL,
        QualificationLevel.ADVANCED_ESIGNATURE_QC,
        QualificationLevel.ADVANCED_ESEAL_QC,
    }
    for cert, trust in itertools.product(_all_attributes(), _all_assertions()):
        if not trust.is_ca_qc:
            assert classifier.classify(cert, trust) not in qualified_levels


def test_no_matching_rule():
    classifier = QualificationClassifier(
        [QualificationRule(QualificationLevel.QUALIFIED_ESEAL, qualified=True)]
    )
    assert classifier.classify(QCC_ONLY, CA_QC) == (
        QualificationLevel.QUALIFIED_ESEAL
    )
    assert classifier.classify(NOTHING, CA_QC) == (
        QualificationLevel.NOT_APPLICABLE
    )


def test_first_matching_rule_wins():
    classifier = QualificationClassifier(
        [
            QualificationRule(QualificationLevel.ADVANCED_ESIGNATURE),
            QualificationRule(QualificationLevel.QUALIFIED_ESIGNATURE),
        ]
    )
    assert classifier.classify(QCC_SSCD, CA_QC) == (
        QualificationLevel.ADVANCED_ESIGNATURE
    )


def test_empty_rules_fall_back_to_default():
    assert QualificationClassifier([]).rules == DEFAULT_QUALIFICATION_RULES


def test_rule_from_config():
    rule = QualificationRule.from_config(
        {'level': 'advanced-eseal-qc', 'qualified': True, 'legal-person': True}
    )
    assert rule == QualificationRule(
        QualificationLevel.ADVANCED_ESEAL_QC,
        qualified=True,
        legal_person=True,
    )
    assert rule.sscd is None


@pytest.mark.parametrize(
    'config,err',
    [
        ({'qualified': True}, 'Missing required key'),
        ({'level': 'SUPER_QUALIFIED'}, 'not a valid QualificationLevel'),
        ({'level': 'QESig'}, 'not a valid QualificationLevel'),
        ({'level': 'ADVANCED_ESEAL', 'sscd': 'yes'}, 'must be a boolean'),
        ({'level': 'ADVANCED_ESEAL', 'natural-person': True}, 'Unexpected'),
    ],
)
def test_rule_from_config_errors(config, err):
    with pytest.raises(ConfigurationError, match=err):
        QualificationRule.from_config(config)


def test_is_for_legal_person():
    assert is_for_legal_person([Qualifier.LEGAL_PERSON.legacy_uri])
    assert is_for_legal_person([Qualifier.LEGAL_PERSON.uri])
    assert not is_for_legal_person([Qualifier.FOR_ESEAL.uri])
