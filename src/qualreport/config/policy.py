from dataclasses import dataclass
from typing import Optional, Tuple

from qualreport.config.api import ConfigurableMixin, process_bool
from qualreport.config.errors import ConfigurationError
from qualreport.validation.qualified.assess import (
    DEFAULT_QUALIFICATION_RULES,
    QualificationClassifier,
    QualificationRule,
)

__all__ = [
    'ValidationPolicy',
    'ReportSettings',
    'DEFAULT_POLICY',
    'DEFAULT_POLICY_NAME',
    'DEFAULT_POLICY_DESCRIPTION',
]


DEFAULT_POLICY_NAME = 'QES AdESQC TL based'
DEFAULT_POLICY_DESCRIPTION = (
    'Validate electronic signatures and indicate whether they are Advanced '
    'electronic Signatures (AdES), AdES supported by a Qualified Certificate '
    '(AdES/QC) or a Qualified electronic Signature (QES). All certificates '
    'and their related chains supporting the signatures are validated '
    'against the EU Member State Trusted Lists.'
)


@dataclass(frozen=True)
class ValidationPolicy(ConfigurableMixin):
    """
    Validation policy under which a report is produced.
    """

    name: str
    """
    Name of the policy, as it should appear in the report.
    """

    description: Optional[str] = None
    """
    Human-readable description of the policy.
    """

    qualification_rules: Tuple[QualificationRule, ...] = (
        DEFAULT_QUALIFICATION_RULES
    )
    """
    Decision table used to determine qualification levels.
    """

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)
        try:
            rules_spec = config_dict['qualification_rules']
        except KeyError:
            return
        if not isinstance(rules_spec, list) or not rules_spec:
            raise ConfigurationError(
                "'qualification-rules' must be a non-empty list."
            )
        rules = []
        for ix, rule_spec in enumerate(rules_spec):
            try:
                rules.append(QualificationRule.from_config(rule_spec))
            except ConfigurationError as e:
                raise ConfigurationError(
                    f"Error in qualification rule #{ix + 1}: {e.msg}"
                ) from e
        config_dict['qualification_rules'] = tuple(rules)

    def create_classifier(self) -> QualificationClassifier:
        return QualificationClassifier(self.qualification_rules)


DEFAULT_POLICY = ValidationPolicy(
    name=DEFAULT_POLICY_NAME, description=DEFAULT_POLICY_DESCRIPTION
)


@dataclass(frozen=True)
class ReportSettings(ConfigurableMixin):
    """
    Settings governing the report build.
    """

    abort_on_signature_error: bool = False
    """
    Abort the whole report when a single signature can't be processed,
    instead of reporting that signature as indeterminate.
    """

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)
        if 'abort_on_signature_error' in config_dict:
            config_dict['abort_on_signature_error'] = bool(
                process_bool(
                    config_dict['abort_on_signature_error'],
                    'abort-on-signature-error',
                )
            )
