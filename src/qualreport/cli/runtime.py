import logging
import sys
from contextlib import contextmanager

import click

from qualreport.bundle import BundleError
from qualreport.cli.utils import logger
from qualreport.config.errors import ConfigurationError
from qualreport.config.logging import LogConfig, StdLogOutput
from qualreport.validation.errors import ReportBuildError


class NoStackTraceFormatter(logging.Formatter):
    def formatException(self, ei) -> str:
        return ""  # pragma: nocover


LOG_FORMAT_STRING = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def logging_setup(log_configs, verbose: bool):
    log_config: LogConfig
    for module, log_config in log_configs.items():
        cur_logger = logging.getLogger(module)
        cur_logger.setLevel(log_config.level)
        if module is not None:
            # records are written by the module's own handler only
            cur_logger.propagate = False
        handler: logging.StreamHandler
        if log_config.is_console:
            if log_config.output == StdLogOutput.STDOUT:
                handler = logging.StreamHandler(sys.stdout)
            else:
                handler = logging.StreamHandler()
            # when logging to the console, don't output stack traces
            # unless in verbose mode
            if verbose:
                formatter = logging.Formatter(LOG_FORMAT_STRING)
            else:
                formatter = NoStackTraceFormatter(LOG_FORMAT_STRING)
        else:
            handler = logging.FileHandler(log_config.output)
            formatter = logging.Formatter(LOG_FORMAT_STRING)
        handler.setFormatter(formatter)
        cur_logger.addHandler(handler)


@contextmanager
def qualreport_exception_manager():
    msg = exception = None
    try:
        yield
    except click.ClickException:
        raise
    except ReportBuildError as e:
        msg = f"Failed to produce report: {e.failure_message}"
        if e.already_reported:
            raise click.ClickException(msg)
        exception = e
    except BundleError as e:
        exception = e
        msg = f"Failed to read input bundle: {e.msg}"
    except ConfigurationError as e:
        exception = e
        msg = f"Configuration error: {e.msg}"
    except Exception as e:
        exception = e
        msg = "Generic processing error."

    if exception is not None:
        logger.error(msg, exc_info=exception)
        raise click.ClickException(msg)


DEFAULT_CONFIG_FILE = 'qualreport.yml'
