from dataclasses import dataclass, field
from typing import Dict, Optional

import yaml

from qualreport.config.errors import ConfigurationError
from qualreport.config.logging import LogConfig, parse_logging_config
from qualreport.config.policy import (
    DEFAULT_POLICY,
    ReportSettings,
    ValidationPolicy,
)

__all__ = ['CLIConfig', 'CLIRootConfig', 'parse_cli_config']


@dataclass(frozen=True)
class CLIConfig:
    """
    CLI configuration settings.
    """

    policy: ValidationPolicy = DEFAULT_POLICY
    """
    The validation policy under which reports are produced.
    If the configuration has no ``policy`` section, the default
    policy is used.
    """

    report_settings: ReportSettings = field(default_factory=ReportSettings)
    """
    Settings for the report builder, read from the ``report`` section.
    """

    raw_config: dict = field(default_factory=dict)
    """
    The raw config data parsed into a Python dictionary.
    """


@dataclass(frozen=True)
class CLIRootConfig:
    """
    Config settings that are only relevant to the CLI root and are not exposed
    to subcommands.
    """

    config: CLIConfig
    """
    General CLI config.
    """

    log_config: Dict[Optional[str], LogConfig]
    """
    Per-module logging configuration. The keys in this dictionary are
    module names, the :class:`.LogConfig` values define the logging settings.

    The ``None`` key houses the configuration for the root logger, if any.
    """


def parse_cli_config(yaml_str) -> CLIRootConfig:
    try:
        config_dict = yaml.safe_load(yaml_str) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse configuration: {e}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError("Configuration should be a dictionary")
    log_config = parse_logging_config(config_dict.get('logging', {}))
    return CLIRootConfig(
        config=CLIConfig(
            **process_config_dict(config_dict), raw_config=config_dict
        ),
        log_config=log_config,
    )


def process_config_dict(config_dict: dict) -> dict:
    result = {}
    try:
        policy_spec = config_dict['policy']
    except KeyError:
        pass
    else:
        try:
            result['policy'] = ValidationPolicy.from_config(policy_spec)
        except ConfigurationError as e:
            raise ConfigurationError(
                f"Error in policy configuration: {e.msg}"
            ) from e

    try:
        report_spec = config_dict['report']
    except KeyError:
        pass
    else:
        try:
            result['report_settings'] = ReportSettings.from_config(
                report_spec
            )
        except ConfigurationError as e:
            raise ConfigurationError(
                f"Error in report configuration: {e.msg}"
            ) from e
    return result
