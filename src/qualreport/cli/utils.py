import logging

import click

logger = logging.getLogger("cli")

readable_file = click.Path(exists=True, readable=True, dir_okay=False)
