"""
Logging settings of the ``qualreport`` command line tool.

They are read from the ``logging`` section of the configuration file::

    logging:
        root-level: INFO
        root-output: qualreport.log
        by-module:
            qualreport.report:
                level: DEBUG
            qualreport.validation.qualified:
                level: WARNING
                output: stderr

Levels are names of the standard :mod:`logging` levels (case-insensitive)
or their numeric values. Outputs are ``stderr``, ``stdout`` or a file name.
A module without an ``output`` setting logs to the root output.
"""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional, Union

from qualreport.config.api import check_config_keys, enforce_required_keys
from qualreport.config.errors import ConfigurationError

__all__ = [
    'DEFAULT_ROOT_LOGGER_LEVEL',
    'LogConfig',
    'StdLogOutput',
    'parse_log_level',
    'parse_log_output',
    'parse_logging_config',
    'force_root_level',
]

LogConfigMap = Dict[Optional[str], 'LogConfig']


class StdLogOutput(enum.Enum):
    STDERR = 'stderr'
    STDOUT = 'stdout'


DEFAULT_ROOT_LOGGER_LEVEL = logging.INFO


@dataclass(frozen=True)
class LogConfig:
    level: int
    """
    Numeric logging level.
    """

    output: Union[StdLogOutput, str] = StdLogOutput.STDERR
    """
    Standard stream or name of the log file.
    """

    @property
    def is_console(self) -> bool:
        return isinstance(self.output, StdLogOutput)


def parse_log_level(value, where: str) -> int:
    """
    Resolve a log level setting to a numeric level.

    :param value:
        A level name like ``'debug'`` or ``'WARNING'``, or a non-negative
        integer.
    :param where:
        Name of the setting, for error messages.
    :return:
        The numeric level.
    :raises ConfigurationError:
        If the value does not designate a log level.
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid log level for {where}: {value}")
    if isinstance(value, int):
        if value < 0:
            raise ConfigurationError(
                f"Log level for {where} must not be negative"
            )
        return value
    if not isinstance(value, str):
        raise ConfigurationError(
            f"Log level for {where} must be int or str, not {type(value)}"
        )
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level '{value}' for {where}")
    return level


def parse_log_output(value, where: str) -> Union[StdLogOutput, str]:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f"Log output for {where} must be a non-empty string"
        )
    try:
        return StdLogOutput(value.lower())
    except ValueError:
        return value


def _module_config(module, settings, root_output) -> LogConfig:
    if not isinstance(module, str):
        raise ConfigurationError("Keys in logging.by-module should be strings")
    if not isinstance(settings, dict):
        raise ConfigurationError(
            f"Logging settings for '{module}' should be a dict"
        )
    where = f"module '{module}'"
    config_name = f"logging of {where}"
    check_config_keys(config_name, ('level', 'output'), settings)
    enforce_required_keys(config_name, ('level',), settings)
    output = settings.get('output')
    return LogConfig(
        level=parse_log_level(settings['level'], where),
        output=(
            root_output if output is None else parse_log_output(output, where)
        ),
    )


def parse_logging_config(log_config_spec) -> LogConfigMap:
    """
    Parse the ``logging`` section of the configuration.

    :param log_config_spec:
        The section, as a dictionary.
    :return:
        The logging settings by module name. The root logger's settings
        are stored under ``None``.
    """
    if not isinstance(log_config_spec, dict):
        raise ConfigurationError('logging config should be a dictionary')
    check_config_keys(
        'logging', ('root-level', 'root-output', 'by-module'), log_config_spec
    )

    root_level = parse_log_level(
        log_config_spec.get('root-level', DEFAULT_ROOT_LOGGER_LEVEL), 'root'
    )
    root_output = parse_log_output(
        log_config_spec.get('root-output', StdLogOutput.STDERR.value), 'root'
    )
    log_config: LogConfigMap = {None: LogConfig(root_level, root_output)}

    by_module = log_config_spec.get('by-module', {})
    if not isinstance(by_module, dict):
        raise ConfigurationError('logging.by-module should be a dict')
    for module, settings in by_module.items():
        log_config[module] = _module_config(module, settings, root_output)
    return log_config


def force_root_level(log_config: LogConfigMap, level: int) -> LogConfigMap:
    """
    Return a copy of the logging settings with the root logger's level
    replaced, keeping its output.
    """
    result = dict(log_config)
    root_config = result.get(None) or LogConfig(DEFAULT_ROOT_LOGGER_LEVEL)
    result[None] = replace(root_config, level=level)
    return result
