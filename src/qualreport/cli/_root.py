import logging

import click

from qualreport import __version__
from qualreport.cli._ctx import CLIContext
from qualreport.cli.config import CLIConfig, parse_cli_config
from qualreport.cli.runtime import DEFAULT_CONFIG_FILE, logging_setup
from qualreport.config.errors import ConfigurationError
from qualreport.config.logging import force_root_level, parse_logging_config

__all__ = ['cli_root']


@click.group()
@click.version_option(prog_name='qualreport', version=__version__)
@click.option(
    '--config',
    help=(
        'YAML file to load configuration from'
        f'[default: {DEFAULT_CONFIG_FILE}]'
    ),
    required=False,
    type=click.File('r'),
)
@click.option(
    '--verbose',
    help='Run in verbose mode',
    required=False,
    default=False,
    type=bool,
    is_flag=True,
)
@click.pass_context
def _root(ctx: click.Context, config, verbose):
    config_text = None
    if config is None:
        try:
            with open(DEFAULT_CONFIG_FILE, 'r') as f:
                config_text = f.read()
            config = DEFAULT_CONFIG_FILE
        except FileNotFoundError:
            pass
        except IOError as e:
            raise click.ClickException(
                f"Failed to read {DEFAULT_CONFIG_FILE}: {str(e)}"
            )
    else:
        try:
            config_text = config.read()
        except IOError as e:
            raise click.ClickException(
                f"Failed to read configuration: {str(e)}",
            )

    ctx.ensure_object(CLIContext)
    ctx_obj: CLIContext = ctx.obj
    if config_text is not None:
        try:
            cfg = parse_cli_config(config_text)
        except ConfigurationError as e:
            raise click.ClickException(f"Configuration error: {e.msg}")
        ctx_obj.config = cfg.config
        log_config = cfg.log_config
    else:
        # grab the default
        ctx_obj.config = CLIConfig()
        log_config = parse_logging_config({})

    if verbose:
        log_config = force_root_level(log_config, logging.DEBUG)

    logging_setup(log_config, verbose)

    if verbose:
        logging.debug("Running with --verbose")
    if config_text is not None:
        logging.debug(f'Finished reading configuration from {config}.')
    else:
        logging.debug('There was no configuration to parse.')


cli_root: click.Group = _root
